from pydantic import BaseModel
from datetime import datetime
from typing import List


class ActivityOut(BaseModel):
    id: int
    username: str
    message: str
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityListResponse(BaseModel):
    message: str
    total: int
    data: List[ActivityOut]
