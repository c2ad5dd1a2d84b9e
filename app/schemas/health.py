from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: Literal["ok", "starting"] = "ok"
    service: str
    version: str
    environment: str
    data_store: str
    timestamp: datetime
