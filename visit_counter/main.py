from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
import time

import uvicorn

from .core.config import settings
from .api.api import api_router

logging.basicConfig(
    level=settings.get_log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # uvicorn logs its own line once the socket is bound
    logger.info(f"Starting visit counter service on port {settings.PORT}")
    yield
    logger.info("Shutting down visit counter service...")

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Visit counter backed by a Redis key",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global error handler caught: {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "message": "Internal server error",
            "detail": str(exc) if settings.DEBUG else "An error occurred"
        }
    )

app.include_router(api_router)

def run():
    """Serve the app with uvicorn"""
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
