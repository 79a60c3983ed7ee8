"""
Adapter pattern implementations for video providers and frame stores.

This module provides abstract base classes and concrete implementations
for the upstream providers that resolve a post to its video (RapidAPI
scrapers, yt-dlp) and for thumbnail frame storage (S3).
"""

from .base import VideoProviderAdapter, FrameStoreAdapter, ProviderPost, ProviderError
from .rapidapi_adapter import InstagramStableScraperAdapter, InstagramScraperApi2Adapter

__all__ = [
    'VideoProviderAdapter',
    'FrameStoreAdapter',
    'ProviderPost',
    'ProviderError',
    'InstagramStableScraperAdapter',
    'InstagramScraperApi2Adapter'
]
