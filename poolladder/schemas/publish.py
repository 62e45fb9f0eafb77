from datetime import datetime

from pydantic import BaseModel, Field


class PublishIn(BaseModel):
    message: str = Field(..., min_length=1, max_length=500)


class PublishOut(BaseModel):
    success: bool = True
    sha: str
    message: str
    url: str
    committed_at: datetime
