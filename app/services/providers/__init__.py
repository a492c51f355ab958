"""
Third-party data providers for search, ads and page meta data
"""

from .base import BaseProvider
from .google_ads import GoogleAdsProvider
from .meta_scraper import MetaDataScraper
from .search_console import SearchConsoleProvider
from .serp_api import SerpApiProvider

__all__ = [
    'BaseProvider',
    'GoogleAdsProvider',
    'MetaDataScraper',
    'SearchConsoleProvider',
    'SerpApiProvider'
]
