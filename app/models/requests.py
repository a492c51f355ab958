"""
Request bodies accepted by the API routers
"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from app.models.seo import KeywordRecord


class WebsiteRequest(BaseModel):
    user_id: str
    website: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class SerpRequest(BaseModel):
    website_url: str = ""
    enhanced: bool = False


class SearchConsoleRequest(BaseModel):
    user_id: str
    website_url: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class MetaDataRequest(BaseModel):
    # Untyped so a non-list payload reaches the scraper's own validation
    urls: Any = None


class StatsRequest(BaseModel):
    keywords: List[KeywordRecord] = Field(default_factory=list)


class GoogleAuthRequest(BaseModel):
    user_id: Optional[str] = None
    action: Literal["get_client_id", "exchange_code"]
    code: Optional[str] = None
    redirect_uri: Optional[str] = None
    state: Optional[str] = None


class MetaAuthRequest(BaseModel):
    user_id: Optional[str] = None
    code: str
    redirect_uri: Optional[str] = None
    state: Optional[str] = None


class GoogleAdsDataRequest(BaseModel):
    user_id: str
    account_id: str
    start_date: date
    end_date: date


class AccountSelection(BaseModel):
    user_id: str
    account_id: str
    platform: str = "google"


class InsightsRequest(BaseModel):
    website: str = ""
    seo_data: Dict[str, Any] = Field(default_factory=dict)
    google_ads_data: Dict[str, Any] = Field(default_factory=dict)
    leads_data: Dict[str, Any] = Field(default_factory=dict)


class FieldMapping(BaseModel):
    website_field: str
    lead_field: str


class ConnectedFormCreate(BaseModel):
    user_id: str
    form_id: str
    form_name: str = ""
    form_url: str = ""
    website_url: str
    field_mappings: List[FieldMapping] = Field(default_factory=list)


class FormSubmission(BaseModel):
    form_id: Optional[str] = None
    form_data: Optional[Dict[str, Any]] = None
    website_url: Optional[str] = None


class LeadUpdate(BaseModel):
    user_id: str
    status: Optional[str] = None
    assigned_to: Optional[str] = None
    remarks: Optional[str] = None


class ExportRequest(BaseModel):
    title: str = "export"
    columns: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)
