"""
Ads Accounts - Connected ad accounts, account selection and connection events
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict
import logging

from app.core.dependencies import get_ad_account_repository, get_events
from app.models.requests import AccountSelection
from app.services.events.notification_bus import Event, EventType, NotificationBus
from app.services.storage import AdAccountRepository

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/accounts")
async def list_accounts(
    user_id: str = Query(...),
    platform: str = Query("google"),
    repository: AdAccountRepository = Depends(get_ad_account_repository)
) -> Dict[str, Any]:
    accounts = await repository.list(user_id, platform)
    selected = next((account for account in accounts if account.get("is_selected")), None)
    return {
        "user_id": user_id,
        "platform": platform,
        "accounts": accounts,
        "selected_account_id": selected["account_id"] if selected else None,
        "total": len(accounts),
    }


@router.post("/accounts/select")
async def select_account(
    request: AccountSelection,
    repository: AdAccountRepository = Depends(get_ad_account_repository),
    events: NotificationBus = Depends(get_events)
) -> Dict[str, Any]:
    """Make one account the active one for its platform"""
    account = await repository.select(request.user_id, request.platform, request.account_id)
    await events.publish(Event(
        EventType.GOOGLE_ADS_ACCOUNT_SELECTED,
        request.user_id,
        {"account_id": request.account_id, "platform": request.platform},
    ))
    return {"success": True, "account": account}


@router.get("/events")
async def recent_events(
    user_id: str = Query(...),
    events: NotificationBus = Depends(get_events)
) -> Dict[str, Any]:
    """
    Latest connection events of a user, oldest first

    Clients poll this after the OAuth popup closes to re-check the
    connection state.
    """
    return {
        "user_id": user_id,
        "events": [event.to_dict() for event in events.recent(user_id)],
    }
