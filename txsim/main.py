"""Transaction Simulator API main entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .analyzers.token_analyzer import TokenAnalyzer
from .config import config
from .models.schemas import ApiError, ErrorResponse
from .pipelines.simulate_tx import TransactionSimulator
from .providers.rpc_client import get_rpc_client
from .routes import health, simulate
from .state.token_cache import TokenCache

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Transaction Simulator API")

    app.state.token_cache = TokenCache()
    app.state.simulator = None

    try:
        client = get_rpc_client()
        analyzer = TokenAnalyzer(client, app.state.token_cache)
        app.state.simulator = TransactionSimulator(client, analyzer)
        logger.info(f"Using Ethereum node at {client.url}")
    except RuntimeError as e:
        logger.error(f"Simulator unavailable: {e}")
        # Don't raise - health checks keep working, simulations return 500

    yield

    # Shutdown
    logger.info("Shutting down Transaction Simulator API")


# Create FastAPI app
app = FastAPI(
    title="Transaction Simulator API",
    description="Preview Ethereum transaction outcomes before broadcasting",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first invalid field as a 400 error."""
    errors = exc.errors()
    first = errors[0] if errors else {}

    loc = [part for part in first.get("loc", ()) if part != "body"]
    field = str(loc[0]) if loc else "request"
    reason = str(first.get("msg", "is invalid")).removeprefix("Value error, ")

    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ApiError(
                code="VALIDATION_ERROR",
                message=f"Invalid {field}: {reason}",
                field=field,
            )
        ).model_dump(),
    )


# Register routes
app.include_router(health.router)
app.include_router(simulate.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Transaction Simulator API",
        "version": "1.0.0",
        "endpoints": {
            "simulate": "POST /api/simulate",
            "health": "GET /api/health",
        },
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "txsim.main:app",
        host=config.api_host,
        port=config.api_port,
        reload=True,
        log_level=config.log_level.lower(),
    )
