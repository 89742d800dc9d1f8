from .client import build_http_client, request_json
from .errors import ShopAgentHTTPError, ShopAgentHTTPNetworkError, ShopAgentHTTPStatusError

__all__ = [
    "build_http_client",
    "request_json",
    "ShopAgentHTTPError",
    "ShopAgentHTTPNetworkError",
    "ShopAgentHTTPStatusError",
]
