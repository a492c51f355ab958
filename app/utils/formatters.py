"""
Formatting utilities for exported table cells
"""

from datetime import date, datetime
from typing import Any
import json
import logging

logger = logging.getLogger(__name__)


def format_cell(value: Any) -> str:
    """
    Render one table value as text

    Whole floats lose their decimals, dates become ISO strings and nested
    values are JSON-encoded.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else f"{value:.2f}"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, dict)):
        return json.dumps(value, default=str)
    return str(value)


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate string with suffix
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix
