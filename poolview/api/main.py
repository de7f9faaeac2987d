import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# --- Imports ---
from poolview.config import Settings
from poolview.core.entities.pool import PoolInfoResponse
from poolview.core.errors import MethodNotAllowed, PoolViewError
from poolview.core.interfaces.datasource import IPoolDataSource
from poolview.core.services import PoolInfoService
from poolview.infrastructure.gateways.subgraph_api import SubgraphGateway

# Setup Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("PoolView")

POOL_INFO_PATHS = ("/api/get-pool-info", "/get-pool-info")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ConfigError propagates: missing credentials must stop the process
    settings = Settings.from_env()
    logging.getLogger().setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    app.state.settings = settings
    app.state.datasource = SubgraphGateway.from_settings(settings)
    logger.info(f"PoolView ready. Subgraph: {settings.subgraph_id}")
    yield


app = FastAPI(
    title="PoolView API",
    version="1.0.0",
    description="Read-only liquidity pool metrics with a top liquidity provider leaderboard",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

# --- Error Mapping ---

@app.exception_handler(PoolViewError)
async def poolview_error_handler(request: Request, exc: PoolViewError):
    headers = {"Allow": "GET, OPTIONS"} if isinstance(exc, MethodNotAllowed) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request parameters", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

# --- Dependency Injection ---

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_datasource(request: Request) -> IPoolDataSource:
    return request.app.state.datasource


def get_pool_service(
    settings: Settings = Depends(get_settings),
    datasource: IPoolDataSource = Depends(get_datasource),
) -> PoolInfoService:
    return PoolInfoService(
        datasource,
        top_providers_limit=settings.top_providers_limit,
        include_non_positive=settings.include_non_positive,
    )

# --- Endpoints ---

@app.get("/health")
async def health():
    return {"status": "healthy", "mode": "The Graph subgraph via Gateway"}


@app.get(POOL_INFO_PATHS[0], response_model=PoolInfoResponse)
@app.get(POOL_INFO_PATHS[1], response_model=PoolInfoResponse, include_in_schema=False)
async def get_pool_info(
    address: Optional[str] = Query(None, description="Pool address / subgraph id"),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Number of top providers"),
    includeNonPositive: Optional[bool] = Query(None, description="Keep providers with net position <= 0"),
    service: PoolInfoService = Depends(get_pool_service),
):
    """
    Pool metrics plus the top liquidity providers ranked by net position.
    """
    return await service.get_pool_info(address, limit=limit, include_non_positive=includeNonPositive)


@app.options(POOL_INFO_PATHS[0], include_in_schema=False)
@app.options(POOL_INFO_PATHS[1], include_in_schema=False)
async def pool_info_preflight():
    return Response(status_code=200)


@app.api_route(POOL_INFO_PATHS[0], methods=["HEAD", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
@app.api_route(POOL_INFO_PATHS[1], methods=["HEAD", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def pool_info_method_not_allowed():
    raise MethodNotAllowed("Method not allowed")
