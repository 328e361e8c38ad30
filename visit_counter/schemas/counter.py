from pydantic import BaseModel

class VisitCount(BaseModel):
    visits: int

class HealthStatus(BaseModel):
    status: str
    service: str
