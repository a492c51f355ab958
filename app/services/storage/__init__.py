"""
Repositories over the MongoDB store collections
"""

from .ad_account_repository import AdAccountRepository
from .form_repository import ConnectedFormRepository
from .lead_repository import LeadRepository
from .token_repository import TokenRepository

__all__ = [
    'AdAccountRepository',
    'ConnectedFormRepository',
    'LeadRepository',
    'TokenRepository'
]
