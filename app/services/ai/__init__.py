"""
AI services for LLM-generated marketing insights
"""

from .insights_engine import InsightsEngine
from .llm_client import LLMClient

__all__ = [
    'InsightsEngine',
    'LLMClient'
]
