from pydantic import BaseModel

from quizhub.schemas.common import UTCDateTime


class HealthCheck(BaseModel):
    status: str
    timestamp: UTCDateTime
