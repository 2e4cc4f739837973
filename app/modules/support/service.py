from supabase import Client
from app.database.remote_client import RemoteDataClient, RemoteDataError
from app.modules.support.schemas import TicketResponse, TicketStatusUpdate, SystemLogResponse
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class SupportService:
    def __init__(self, supabase: Client):
        self.remote = RemoteDataClient(supabase)

    def list_tickets(self) -> List[TicketResponse]:
        """All tickets, newest first, with the requester's name and email"""
        try:
            rows = self.remote.select(
                "support_tickets",
                columns="*, profiles(full_name, email)",
                order_by="created_at",
                desc=True,
            )
        except RemoteDataError as e:
            raise HTTPException(status_code=502, detail=f"Failed to load tickets: {e.message}")
        return [TicketResponse(**row) for row in rows]

    def update_ticket_status(self, ticket_id: str, data: TicketStatusUpdate) -> TicketResponse:
        try:
            rows = self.remote.update("support_tickets", "id", ticket_id, {"status": data.status})
        except RemoteDataError as e:
            raise HTTPException(status_code=502, detail=f"Failed to update ticket: {e.message}")
        if not rows:
            raise HTTPException(status_code=404, detail="Ticket not found")
        logger.info(f"Ticket {ticket_id} -> {data.status}")
        return TicketResponse(**rows[0])

    def list_logs(self, limit: int = 50) -> List[SystemLogResponse]:
        try:
            rows = self.remote.select("system_logs", order_by="created_at", desc=True, limit=limit)
        except RemoteDataError as e:
            raise HTTPException(status_code=502, detail=f"Failed to load system logs: {e.message}")
        return [SystemLogResponse(**row) for row in rows]
