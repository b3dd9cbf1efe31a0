import logging
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from cart_service.core.config import settings
from cart_service.core.database import connect_to_mongo, close_mongo_connection
from cart_service.api.errors import register_exception_handlers
from cart_service.api.routes import cart

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Per-user shopping cart service: add, view and remove cart items",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def request_log_middleware(request: Request, call_next):
    """Stamp the request time and, in development, log each request."""
    started = time.perf_counter()
    request.state.request_time = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    response = await call_next(request)
    if settings.ENVIRONMENT == "development":
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f} ms")
    return response


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    logger.info("Starting up cart service...")
    await connect_to_mongo()
    logger.info("Cart service started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up services on shutdown."""
    logger.info("Shutting down cart service...")
    await close_mongo_connection()
    logger.info("Cart service shut down successfully")


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "cart-service",
        "version": "1.0.0"
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Hello from the home page",
        "app": settings.PROJECT_NAME,
        "docs": "/docs",
        "health": "/health"
    }


# Include routers
app.include_router(cart.router, prefix=f"{settings.API_V1_PREFIX}/cart", tags=["Cart"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
