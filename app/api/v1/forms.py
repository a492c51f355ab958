"""
Connected Forms API - Website forms that feed the lead table
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Any, Dict, List
import logging

from app.core.dependencies import get_form_repository, get_lead_repository
from app.models.requests import ConnectedFormCreate, FormSubmission
from app.services.storage import ConnectedFormRepository, LeadRepository
from app.utils.error_handlers import ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)

UNMAPPED = "none"


def map_submission(form_data: Dict[str, Any], field_mappings: List[Dict[str, str]]) -> Dict[str, Any]:
    """
    Copy submitted values onto lead fields

    Mappings to "none" and empty submitted values are skipped.
    """
    lead = {}
    for mapping in field_mappings:
        lead_field = mapping.get("lead_field")
        if not lead_field or lead_field == UNMAPPED:
            continue
        value = form_data.get(mapping.get("website_field"))
        if value is None or value == "":
            continue
        lead[lead_field] = value
    return lead


@router.get("")
async def list_forms(
    user_id: str = Query(...),
    forms: ConnectedFormRepository = Depends(get_form_repository)
) -> Dict[str, Any]:
    rows = await forms.list(user_id)
    return {"user_id": user_id, "forms": rows, "total": len(rows)}


@router.post("")
async def connect_form(
    request: ConnectedFormCreate,
    forms: ConnectedFormRepository = Depends(get_form_repository)
) -> Dict[str, Any]:
    if not request.form_id.strip():
        raise ValidationError("Form ID is required")
    if not request.website_url.strip():
        raise ValidationError("Website URL is required")
    if await forms.find_by_form_id(request.form_id):
        raise ValidationError(f"Form {request.form_id} is already connected")

    form = await forms.create(request.model_dump())
    return {"success": True, "form": form}


@router.delete("/{form_id}")
async def disconnect_form(
    form_id: str,
    user_id: str = Query(...),
    forms: ConnectedFormRepository = Depends(get_form_repository)
) -> Dict[str, Any]:
    if not await forms.delete(form_id, user_id):
        raise HTTPException(status_code=404, detail="Form not found")
    return {"success": True}


@router.post("/webhook")
async def form_webhook(
    submission: FormSubmission,
    forms: ConnectedFormRepository = Depends(get_form_repository),
    leads: LeadRepository = Depends(get_lead_repository)
) -> Dict[str, Any]:
    """
    Turn a website form submission into a new lead

    The connected form's field mappings decide which submitted values land
    on the lead; the full submission is kept as raw data.
    """
    if not submission.form_id or not submission.form_data:
        raise ValidationError("form_id and form_data are required")

    form = await forms.find_by_form_id(submission.form_id)
    if form is None:
        logger.warning(f"Webhook received for unknown form: {submission.form_id}")
        raise HTTPException(status_code=404, detail="Form not found or not connected")

    lead = await leads.create({
        **map_submission(submission.form_data, form.get("field_mappings") or []),
        "user_id": form["user_id"],
        "form_id": submission.form_id,
        "website_url": submission.website_url or form.get("website_url"),
        "source": "website_form",
        "status": "New",
        "raw_data": submission.form_data,
    })

    logger.info(f"Lead {lead['id']} created from form {submission.form_id}")
    return {"success": True, "lead_id": lead["id"]}
