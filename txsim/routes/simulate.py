"""Simulation endpoints."""
import logging
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..models.schemas import (
    ApiError,
    CacheClearResponse,
    ErrorResponse,
    SimulateRequest,
    SimulateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["simulation"])


@router.post(
    "/simulate",
    response_model=SimulateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def simulate(body: SimulateRequest, request: Request):
    """
    Simulate an Ethereum transaction without sending it on-chain.

    Executes eth_call, estimates gas and inspects ERC20 calldata. Reverts
    are returned as a decoded error inside the result, not as HTTP errors.
    """
    simulator = getattr(request.app.state, "simulator", None)

    try:
        if simulator is None:
            raise RuntimeError("ETHEREUM_RPC_URL not set")

        result = await simulator.simulate(body)
        return SimulateResponse(result=result)

    except Exception as e:
        logger.error(f"Simulation error: {e}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error=ApiError(
                    code="SIMULATION_ERROR",
                    message="An unexpected error occurred during simulation",
                )
            ).model_dump(exclude_none=True),
        )


@router.post("/admin/token-cache/clear", response_model=CacheClearResponse)
async def clear_token_cache(request: Request) -> CacheClearResponse:
    """Drop all cached token metadata."""
    token_cache = getattr(request.app.state, "token_cache", None)
    cleared = token_cache.clear() if token_cache is not None else 0

    logger.info(f"Cleared {cleared} cached tokens")

    return CacheClearResponse(cleared=cleared)
