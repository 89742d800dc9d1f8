from __future__ import annotations


class ShopAgentError(RuntimeError):
    """Base error carrying a wire code and an HTTP-equivalent status."""

    code = "INTERNAL_ERROR"
    status = 500

    def __init__(self, message: str, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status is not None:
            self.status = status


class ValidationError(ShopAgentError):
    code = "VALIDATION_ERROR"
    status = 400


class NotFoundError(ShopAgentError):
    code = "NOT_FOUND"
    status = 404


class UnauthorizedError(ShopAgentError):
    code = "UNAUTHORIZED"
    status = 401


class CartError(ShopAgentError):
    code = "CART_ERROR"
    status = 500


class ApiError(ShopAgentError):
    """Upstream catalog failure with no local substitute."""

    code = "API_ERROR"
    status = 502


class PlanParseError(ShopAgentError):
    code = "PLAN_PARSE_ERROR"
    status = 502


class NarrationParseError(ShopAgentError):
    code = "NARRATION_PARSE_ERROR"
    status = 502


class UnsupportedActionError(ShopAgentError):
    code = "UNSUPPORTED_ACTION"
    status = 400


class InternalError(ShopAgentError):
    code = "INTERNAL_ERROR"
    status = 500


class LLMUnavailable(ShopAgentError):
    code = "LLM_UNAVAILABLE"
    status = 503


class ActionFailedError(ShopAgentError):
    """Raised by the in-process action client when the gateway answers with an error envelope."""

    def __init__(self, message: str, code: str | None = None, action: str | None = None) -> None:
        super().__init__(message, code=code or "INTERNAL_ERROR")
        self.action = action
