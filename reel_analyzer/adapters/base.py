"""
Abstract base classes for video providers and frame stores.

Defines the interface that all adapters must implement, enabling
easy swapping between different upstream scraping APIs and
storage backends for hosted thumbnails.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Tuple
from dataclasses import dataclass, field

import httpx


@dataclass
class ProviderPost:
    """What a video provider knows about a post"""
    video_url: Optional[str] = None
    caption: str = ""
    hashtags: List[str] = field(default_factory=list)
    location_tag: Optional[str] = None
    thumbnail_url: Optional[str] = None


class ProviderError(Exception):
    """Raised by a provider when its attempt yields no usable post data"""

    def __init__(self, message: str, post: Optional[ProviderPost] = None):
        super().__init__(message)
        # partial metadata the provider did return
        self.post = post


class VideoProviderAdapter(ABC):
    """Abstract base class for video providers"""

    name: str = "provider"
    platforms: Tuple[str, ...] = ()

    def supports(self, platform: str) -> bool:
        return platform in self.platforms

    @abstractmethod
    async def fetch_post(self, post_url: str, client: httpx.AsyncClient, timeout: float) -> ProviderPost:
        """
        Look up a post and return its direct video URL and metadata.

        Args:
            post_url: Public URL of the social media post
            client: Shared HTTP client for the analysis
            timeout: Timeout in seconds for this provider call

        Returns:
            ProviderPost with a video_url

        Raises:
            ProviderError: if the provider cannot supply a video URL
        """
        pass


class FrameStoreAdapter(ABC):
    """Abstract base class for thumbnail frame storage"""

    @abstractmethod
    def connect(self) -> None:
        """Initialize the storage client"""
        pass

    @abstractmethod
    def store_frame(self, key: str, image_bytes: bytes) -> str:
        """
        Upload a JPEG frame.

        Args:
            key: Object name, unique per analysis
            image_bytes: Encoded JPEG

        Returns:
            Long-lived public URL of the stored frame
        """
        pass
