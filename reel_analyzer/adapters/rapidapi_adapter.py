"""
RapidAPI Instagram scraper adapters.

Two independent scraping APIs that resolve an Instagram post to its
direct video URL plus caption, location tag and thumbnail.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .base import VideoProviderAdapter, ProviderPost, ProviderError
from ..pipeline.util import extract_instagram_shortcode, extract_hashtags, clean_text

logger = logging.getLogger("reel_analyzer")


class RapidAPIAdapter(VideoProviderAdapter):
    """Shared request handling for RapidAPI-hosted scrapers"""

    host: str = ""
    platforms = ("instagram",)

    def __init__(self, api_key: str):
        self.api_key = api_key

    def _headers(self) -> Dict[str, str]:
        return {
            'x-rapidapi-key': self.api_key,
            'x-rapidapi-host': self.host
        }

    async def _get_json(self, client: httpx.AsyncClient, path: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        response = await client.get(
            f"https://{self.host}{path}",
            params=params,
            headers=self._headers(),
            timeout=timeout
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ProviderError(f"{self.name}: unexpected response payload")
        return data

    @staticmethod
    def _location_name(location: Any) -> Optional[str]:
        if isinstance(location, dict):
            return location.get('name')
        if isinstance(location, str):
            return location
        return None

    @staticmethod
    def _build_post(video_url: Optional[str], caption: Optional[str], location: Optional[str],
                    thumbnail_url: Optional[str]) -> ProviderPost:
        caption = caption or ""
        return ProviderPost(
            video_url=clean_text(video_url),
            caption=caption,
            hashtags=extract_hashtags(caption),
            location_tag=clean_text(location),
            thumbnail_url=clean_text(thumbnail_url)
        )


class InstagramStableScraperAdapter(RapidAPIAdapter):
    """instagram-scraper-stable-api, media data v2 endpoint"""

    name = "instagram_stable"
    host = "instagram-scraper-stable-api.p.rapidapi.com"

    async def fetch_post(self, post_url: str, client: httpx.AsyncClient, timeout: float) -> ProviderPost:
        media_code = extract_instagram_shortcode(post_url)
        if not media_code:
            raise ProviderError(f"{self.name}: could not extract media code from {post_url}")

        data = await self._get_json(client, "/get_media_data_v2.php", {'media_code': media_code}, timeout)

        if data.get('message') and not data.get('video_url'):
            raise ProviderError(f"{self.name}: {data['message']}")

        post = self._build_post(
            video_url=data.get('video_url'),
            caption=self._caption(data),
            location=self._location_name(data.get('location')),
            thumbnail_url=data.get('thumbnail_src') or data.get('display_url')
        )

        if not post.video_url:
            raise ProviderError(f"{self.name}: no video URL in response", post)

        return post

    @staticmethod
    def _caption(data: Dict[str, Any]) -> str:
        edges = (data.get('edge_media_to_caption') or {}).get('edges') or []
        if edges:
            return (edges[0].get('node') or {}).get('text') or ''
        caption = data.get('caption')
        if isinstance(caption, dict):
            return caption.get('text') or ''
        return caption or ''


class InstagramScraperApi2Adapter(RapidAPIAdapter):
    """instagram-scraper-api2, post info endpoint"""

    name = "instagram_api2"
    host = "instagram-scraper-api2.p.rapidapi.com"

    async def fetch_post(self, post_url: str, client: httpx.AsyncClient, timeout: float) -> ProviderPost:
        payload = await self._get_json(client, "/v1/post_info", {'code_or_id_or_url': post_url}, timeout)
        data = payload.get('data') or {}

        caption = data.get('caption')
        if isinstance(caption, dict):
            caption = caption.get('text')

        post = self._build_post(
            video_url=data.get('video_url'),
            caption=caption,
            location=self._location_name(data.get('location')),
            thumbnail_url=data.get('thumbnail_url') or data.get('display_url')
        )

        if not post.video_url:
            raise ProviderError(f"{self.name}: no video URL in response", post)

        return post
