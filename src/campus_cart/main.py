import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campus_cart.api.v1 import admin, auth, borrow, deliveries, items, orders, riders
from campus_cart.core.config import settings
from campus_cart.core.database import engine
from campus_cart.core.exceptions import LifecycleError
from campus_cart.core.redis import close_redis
from campus_cart.middleware.metrics import PrometheusMiddleware, metrics_endpoint
from campus_cart.middleware.rate_limit import RateLimitMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting Campus Cart...")

    yield

    logger.info("Shutting down, closing Redis and database pools")
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="Campus Cart",
    version="1.0.0",
    description="Campus marketplace: orders, rider deliveries and item borrowing",
    lifespan=lifespan,
)


@app.exception_handler(LifecycleError)
async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


# Prometheus Metrics Middleware (must be first to capture all requests)
app.add_middleware(PrometheusMiddleware)

app.add_middleware(RateLimitMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(items.router, prefix="/api/v1/items", tags=["items"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["orders"])
app.include_router(deliveries.router, prefix="/api/v1/deliveries", tags=["deliveries"])
app.include_router(borrow.router, prefix="/api/v1/borrow", tags=["borrow"])
app.include_router(riders.router, prefix="/api/v1/riders", tags=["riders"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["admin"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


app.add_route("/metrics", metrics_endpoint)
