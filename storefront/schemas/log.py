from pydantic import BaseModel, ConfigDict
from typing import Any, List, Optional
from datetime import datetime

from storefront.schemas.user import PageMeta


class LogEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ts: datetime
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    meta: Optional[Any] = None


class LogPage(BaseModel):
    data: List[LogEntry]
    meta: PageMeta
