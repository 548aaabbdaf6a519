"""FastAPI application hosting alert actions and the alert monitor."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pricealert.core.config import settings
from pricealert.container import build_container
import logging
import time
import sys

# Import routers
from pricealert.api.routes import alerts, quotes, history, health

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Price Alert Monitor API", version="1.0.0")


@app.on_event("startup")
async def startup_event():
    """Build components, prepare storage and start the alert monitor."""
    logger.info("Application starting up...")

    if settings.store_backend == "sql":
        from pricealert.core.database import init_db
        await init_db()

    container = build_container()
    app.state.container = container
    container.monitor.start()

    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the monitor and release connections."""
    container = getattr(app.state, "container", None)
    if container is not None:
        await container.close()
        app.state.container = None
    logger.info("Application shut down")


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests and responses."""
    start_time = time.time()

    logger.info(f"→ {request.method} {request.url.path}")
    logger.debug(f"  Query params: {dict(request.query_params)}")

    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(f"← {request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.3f}s")

        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"← {request.method} {request.url.path} - ERROR after {process_time:.3f}s: {str(e)}")
        raise


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and ensure CORS headers are sent."""
    logger.error(f"Unhandled exception in {request.method} {request.url.path}: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.log_level == "DEBUG" else "Internal server error"
        },
        headers={
            "Access-Control-Allow-Origin": request.headers.get("origin", "*"),
            "Access-Control-Allow-Credentials": "true",
        }
    )

# Configure CORS
logger.info(f"Configuring CORS with origins: {settings.cors_origins_list}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(health.router)
app.include_router(alerts.router)
app.include_router(quotes.router)
app.include_router(history.router)


@app.get("/")
async def root():
    """Service identification endpoint."""
    return {"status": "ok", "service": "pricealert-api"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.backend_port)
