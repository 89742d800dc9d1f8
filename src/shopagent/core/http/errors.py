from __future__ import annotations


class ShopAgentHTTPError(RuntimeError):
    """Base error for upstream HTTP calls."""


class ShopAgentHTTPStatusError(ShopAgentHTTPError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ShopAgentHTTPNetworkError(ShopAgentHTTPError):
    """Raised when the transport fails or the body cannot be decoded."""
