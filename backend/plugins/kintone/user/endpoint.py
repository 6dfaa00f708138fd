from typing import Annotated

from fastapi import APIRouter, Depends, Request

from ..http import ANY_METHOD, require_method
from ..messages import RECORDED
from .models import MessageResponse, UserEventPayload
from .service import UserEventService, get_user_event_service

router = APIRouter()


@router.api_route(
    "",
    methods=ANY_METHOD,
    response_model=MessageResponse,
    summary="Record a plugin usage event",
)
async def record_user_event(
    request: Request,
    service: Annotated[UserEventService, Depends(get_user_event_service)],
) -> MessageResponse:
    """
    Records the event described by the JSON text in the request body.

    The body is parsed here rather than by FastAPI because clients send it
    without a JSON content type. A body that does not parse is not handled:
    it reaches the application's generic error handler.
    """
    require_method(request, "POST")
    payload = UserEventPayload.model_validate_json(await request.body())
    await service.record(payload)
    return MessageResponse(result=RECORDED)
