"""
api/routes/v1/logs.py -- Audit log endpoints (admin only).

Routes:
  GET    /api/v1/logs  -- newest entries first (?limit=, default 100, max 1000)
  DELETE /api/v1/logs  -- clear the log
"""

from fastapi import APIRouter, Depends, Query, Request

from api.models import LogEntryResponse, MessageResponse
from audit.store import AuditLog
from auth.dependencies import require_admin

# Auth policy:
# - every route: requires admin -- login notices include client addresses
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/logs", response_model=list[LogEntryResponse])
def list_logs(request: Request, limit: int = Query(default=100, ge=1, le=1000)) -> list[LogEntryResponse]:
    audit: AuditLog = request.app.state.audit
    return [
        LogEntryResponse(id=e.id, type=e.type, function=e.function, text=e.text, created_at=e.created_at)
        for e in audit.list_logs(limit)
    ]


@router.delete("/logs", response_model=MessageResponse)
def clear_logs(request: Request) -> MessageResponse:
    audit: AuditLog = request.app.state.audit
    removed = audit.clear()
    return MessageResponse(message=f"Removed {removed} log entries.")
