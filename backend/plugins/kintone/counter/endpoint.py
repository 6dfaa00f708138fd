from typing import Annotated

from fastapi import APIRouter, Depends, Request

from ..http import ANY_METHOD, require_method
from .models import CounterResponse
from .service import CounterService, get_counter_service

router = APIRouter()


@router.api_route(
    "",
    methods=ANY_METHOD,
    response_model=CounterResponse,
    summary="Get total events and hosts",
)
async def get_counter(
    request: Request,
    service: Annotated[CounterService, Depends(get_counter_service)],
) -> CounterResponse:
    """
    Returns the sum of all host counters and the number of hosts.
    Only GET is accepted; other methods get a 400.
    """
    require_method(request, "GET")
    return await service.get_totals()
