from fastapi import APIRouter
from .endpoints import counter
from ..schemas.counter import HealthStatus

api_router = APIRouter()

api_router.include_router(
    counter.router,
    tags=["counter"],
    responses={
        500: {"description": "Internal server error"},
    }
)

@api_router.get("/health", tags=["health"], response_model=HealthStatus)
async def health_check():
    return HealthStatus(status="healthy", service="visit_counter")
