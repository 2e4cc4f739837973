from pydantic import BaseModel
from typing import Optional, Union, Literal
from datetime import datetime

TicketStatus = Literal["open", "in_progress", "resolved"]


class TicketProfile(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


class TicketResponse(BaseModel):
    id: Union[int, str]
    user_id: Optional[str] = None
    subject: str
    message: str
    status: str = "open"
    created_at: Optional[datetime] = None
    profiles: Optional[TicketProfile] = None


class TicketStatusUpdate(BaseModel):
    status: TicketStatus


class SystemLogResponse(BaseModel):
    id: Union[int, str]
    event_type: str
    message: Optional[str] = None
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
