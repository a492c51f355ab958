"""
Leads API - Lead table filters, status updates and lead stats
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Any, Dict, Optional
import logging

from app.core.dependencies import get_form_repository, get_lead_repository
from app.models.requests import LeadUpdate
from app.services.storage import ConnectedFormRepository, LeadRepository
from app.services.storage.lead_repository import LEAD_STATUSES
from app.utils.error_handlers import ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def list_leads(
    user_id: str = Query(...),
    status: Optional[str] = Query(None, description="Lead status or All"),
    assigned_to: Optional[str] = Query(None, description="Assignee, Unassigned or All"),
    website: Optional[str] = Query(None, description="Website of the connected form, or All"),
    leads: LeadRepository = Depends(get_lead_repository)
) -> Dict[str, Any]:
    """Leads of a user, newest first, with optional filters"""
    rows = await leads.list(user_id, status=status, assigned_to=assigned_to, website=website)
    return {
        "user_id": user_id,
        "filters": {
            "status": status,
            "assigned_to": assigned_to,
            "website": website,
        },
        "leads": rows,
        "total": len(rows),
    }


@router.get("/stats")
async def lead_stats(
    user_id: str = Query(...),
    leads: LeadRepository = Depends(get_lead_repository)
) -> Dict[str, Any]:
    return await leads.stats(user_id)


@router.get("/filters")
async def lead_filters(
    user_id: str = Query(...),
    forms: ConnectedFormRepository = Depends(get_form_repository)
) -> Dict[str, Any]:
    """Values offered by the lead table filters"""
    return {
        "statuses": LEAD_STATUSES,
        "websites": await forms.websites(user_id),
    }


@router.get("/{lead_id}")
async def get_lead(
    lead_id: str,
    user_id: str = Query(...),
    leads: LeadRepository = Depends(get_lead_repository)
) -> Dict[str, Any]:
    lead = await leads.get(lead_id, user_id)
    if lead is None:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


@router.patch("/{lead_id}")
async def update_lead(
    lead_id: str,
    request: LeadUpdate,
    leads: LeadRepository = Depends(get_lead_repository)
) -> Dict[str, Any]:
    """
    Update status, assignee or remarks

    An empty assignee unassigns the lead.
    """
    if request.status is not None and request.status not in LEAD_STATUSES:
        raise ValidationError(
            f"Invalid status '{request.status}'. Use one of: {', '.join(LEAD_STATUSES)}"
        )

    changes = request.model_dump(exclude={"user_id"}, exclude_unset=True)
    if not changes:
        raise ValidationError("Nothing to update")

    if not await leads.update(lead_id, request.user_id, changes):
        raise HTTPException(status_code=404, detail="Lead not found")
    return {"success": True, "lead": await leads.get(lead_id, request.user_id)}


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: str,
    user_id: str = Query(...),
    leads: LeadRepository = Depends(get_lead_repository)
) -> Dict[str, Any]:
    if not await leads.delete(lead_id, user_id):
        raise HTTPException(status_code=404, detail="Lead not found")
    return {"success": True}
