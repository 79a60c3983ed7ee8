import logging
from typing import List, Optional

import httpx

from ..adapters.base import VideoProviderAdapter, ProviderPost, ProviderError
from ..errors import DownloadError
from ..models import RawContent
from .util import detect_platform, extract_hashtags

logger = logging.getLogger("reel_analyzer")


class ContentFetcher:
    """
    Resolves a post URL to its video bytes and caption metadata.

    Providers are tried strictly in order, never concurrently, since each
    call costs money. The first provider whose video URL downloads wins.
    """

    def __init__(
        self,
        providers: List[VideoProviderAdapter],
        client: Optional[httpx.AsyncClient] = None,
        provider_timeout: float = 15.0,
        download_timeout: float = 30.0,
        max_video_bytes: int = 100 * 1024 * 1024
    ):
        self.providers = providers
        self.client = client
        self.provider_timeout = provider_timeout
        self.download_timeout = download_timeout
        self.max_video_bytes = max_video_bytes

    async def fetch(self, post_url: str) -> RawContent:
        """
        Download the video and metadata for a post.

        Args:
            post_url: Public Instagram or TikTok post URL

        Returns:
            RawContent with video bytes and whatever metadata providers supplied

        Raises:
            DownloadError: if the URL is unsupported or every provider fails
        """
        platform = detect_platform(post_url)
        if not platform:
            raise DownloadError(f"Unsupported post URL: {post_url}", details={'post_url': post_url})

        if self.client is not None:
            return await self._fetch_with(self.client, post_url, platform)

        async with httpx.AsyncClient(follow_redirects=True) as client:
            return await self._fetch_with(client, post_url, platform)

    async def _fetch_with(self, client: httpx.AsyncClient, post_url: str, platform: str) -> RawContent:
        merged = ProviderPost()
        errors = []

        for provider in self.providers:
            if not provider.supports(platform):
                logger.debug(f"FETCH: {provider.name} does not support {platform}, skipping")
                continue

            logger.info(f"FETCH: Trying {provider.name} for {post_url}")

            try:
                post = await provider.fetch_post(post_url, client, self.provider_timeout)
            except ProviderError as e:
                if e.post is not None:
                    self._absorb_metadata(merged, e.post)
                errors.append(f"{provider.name}: {e}")
                logger.warning(f"FETCH: {provider.name} failed: {e}")
                continue
            except Exception as e:
                errors.append(f"{provider.name}: {e}")
                logger.warning(f"FETCH: {provider.name} failed: {e}")
                continue

            self._absorb_metadata(merged, post)

            try:
                video_bytes = await self._download(client, post.video_url)
            except Exception as e:
                errors.append(f"{provider.name} download: {e}")
                logger.warning(f"FETCH: Video download from {provider.name} failed: {e}")
                continue

            logger.info(f"FETCH: Downloaded {len(video_bytes)} bytes via {provider.name}")

            return RawContent(
                video_bytes=video_bytes,
                caption=merged.caption,
                hashtags=merged.hashtags or extract_hashtags(merged.caption),
                location_tag=merged.location_tag,
                provider_thumbnail_url=merged.thumbnail_url,
                platform=platform,
                provider=provider.name
            )

        raise DownloadError(
            f"No provider could supply the video for {post_url}",
            details={'post_url': post_url, 'errors': errors}
        )

    @staticmethod
    def _absorb_metadata(merged: ProviderPost, post: ProviderPost) -> None:
        """Keep the first non-empty value seen for each metadata field"""
        if not merged.caption and post.caption:
            merged.caption = post.caption
        if not merged.hashtags and post.hashtags:
            merged.hashtags = list(post.hashtags)
        if not merged.location_tag and post.location_tag:
            merged.location_tag = post.location_tag
        if not merged.thumbnail_url and post.thumbnail_url:
            merged.thumbnail_url = post.thumbnail_url

    async def _download(self, client: httpx.AsyncClient, video_url: str) -> bytes:
        chunks = []
        size = 0

        async with client.stream("GET", video_url, timeout=self.download_timeout) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                size += len(chunk)
                if size > self.max_video_bytes:
                    raise DownloadError(f"Video exceeds {self.max_video_bytes} bytes")
                chunks.append(chunk)

        if not size:
            raise DownloadError("Downloaded video is empty")

        return b"".join(chunks)
