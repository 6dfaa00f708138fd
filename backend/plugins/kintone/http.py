from fastapi import Request

from backend.utils.exceptions import BadRequestError

from .messages import INVALID_PARAMETERS

# Routes accept every method so a wrong one is answered with the plugin
# clients' 400 message instead of FastAPI's 405.
ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def require_method(request: Request, method: str) -> None:
    if request.method != method:
        raise BadRequestError(INVALID_PARAMETERS)
