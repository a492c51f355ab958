"""
Validation utilities
"""

import re
from typing import Optional
import logging

from app.utils.error_handlers import ValidationError

logger = logging.getLogger(__name__)


def validate_domain(domain: str) -> bool:
    """
    Validate domain name
    """
    pattern = r'^[a-zA-Z0-9\-\.]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, domain) is not None


def require_website(website: Optional[str]) -> str:
    """
    Normalize a selected website; a blank value is rejected before any network call

    Accepts a full URL or a bare domain, and Search Console's
    "sc-domain:" property form.
    """
    value = (website or "").strip()
    if not value:
        raise ValidationError("Website URL is required")

    candidate = value[len("sc-domain:"):] if value.startswith("sc-domain:") else value
    host = re.sub(r"^https?://", "", candidate).split("/")[0]
    if not validate_domain(host.split(":")[0]):
        raise ValidationError(f"Invalid website: {value}")
    return value
