from fastapi import APIRouter, Depends
from app.database.supabase_client import get_admin_supabase
from app.modules.support.schemas import TicketResponse, TicketStatusUpdate, SystemLogResponse
from app.modules.support.service import SupportService
from app.core.dependencies import require_superadmin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/support", tags=["support"])


def get_support_service(supabase: Client = Depends(get_admin_supabase)) -> SupportService:
    return SupportService(supabase)


@router.get("/tickets", response_model=List[TicketResponse])
async def list_tickets(
    admin: Dict = Depends(require_superadmin),
    service: SupportService = Depends(get_support_service)
):
    return service.list_tickets()


@router.patch("/tickets/{ticket_id}", response_model=TicketResponse)
async def update_ticket(
    ticket_id: str,
    body: TicketStatusUpdate,
    admin: Dict = Depends(require_superadmin),
    service: SupportService = Depends(get_support_service)
):
    """Move a ticket to open, in_progress or resolved"""
    return service.update_ticket_status(ticket_id, body)


@router.get("/logs", response_model=List[SystemLogResponse])
async def list_logs(
    limit: int = 50,
    admin: Dict = Depends(require_superadmin),
    service: SupportService = Depends(get_support_service)
):
    """Latest system log entries"""
    return service.list_logs(limit=limit)
