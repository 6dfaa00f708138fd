import json


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(self, detail: str, status_code: int = 500):
        self.detail = detail
        self.status_code = status_code
        super().__init__(self.detail)


class BadRequestError(ServiceError):
    """Raised for invalid client requests (e.g., wrong HTTP method)."""

    def __init__(self, detail: str = "Bad request"):
        super().__init__(detail, status_code=400)


class StoreError(ServiceError):
    """Raised when the tree store cannot be read or written."""

    def __init__(self, detail: str = "Tree store operation failed"):
        super().__init__(detail)


class FallbackDeliveryError(ServiceError):
    """Raised when the fallback endpoint rejects or cannot receive a payload."""

    def __init__(self, detail: str = "Fallback delivery failed"):
        super().__init__(detail)


def serialize_error(exc: BaseException) -> str:
    """Renders an exception as a compact JSON object for client-facing messages."""
    return json.dumps(
        {"type": type(exc).__name__, "message": str(exc)}, ensure_ascii=False
    )
