"""
yt-dlp adapter used as a last-resort video provider.

Resolves the direct media URL without downloading, and is the only
provider that handles TikTok posts.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
import yt_dlp

from .base import VideoProviderAdapter, ProviderPost, ProviderError
from ..pipeline.util import extract_hashtags, clean_text

logger = logging.getLogger("reel_analyzer")

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class YtDlpAdapter(VideoProviderAdapter):
    """yt-dlp metadata extraction (no download)"""

    name = "ytdlp"
    platforms = ("instagram", "tiktok")

    def __init__(self, extra_options: Optional[Dict[str, Any]] = None):
        self.extra_options = extra_options or {}

    def _options(self, timeout: float) -> Dict[str, Any]:
        options = {
            'quiet': True,
            'no_warnings': True,
            'skip_download': True,
            'format': 'best[ext=mp4]/best',
            'socket_timeout': timeout,
            'extractor_retries': 1,
            'http_headers': {'User-Agent': USER_AGENT},
        }
        options.update(self.extra_options)
        return options

    def _extract_info(self, post_url: str, timeout: float) -> Dict[str, Any]:
        with yt_dlp.YoutubeDL(self._options(timeout)) as ydl:
            return ydl.extract_info(post_url, download=False)

    async def fetch_post(self, post_url: str, client: httpx.AsyncClient, timeout: float) -> ProviderPost:
        try:
            info = await asyncio.wait_for(
                asyncio.to_thread(self._extract_info, post_url, timeout),
                timeout=timeout
            )
        except yt_dlp.utils.DownloadError as e:
            raise ProviderError(f"{self.name}: {e}")

        if not info:
            raise ProviderError(f"{self.name}: no metadata extracted")

        caption = info.get('description') or info.get('title') or ''
        tags = info.get('tags') or []

        post = ProviderPost(
            video_url=clean_text(self._video_url(info)),
            caption=caption,
            hashtags=extract_hashtags(caption) or [f"#{tag}" for tag in tags if tag],
            location_tag=clean_text(info.get('location')),
            thumbnail_url=clean_text(info.get('thumbnail'))
        )

        if not post.video_url:
            raise ProviderError(f"{self.name}: no video URL in metadata", post)

        return post

    @staticmethod
    def _video_url(info: Dict[str, Any]) -> Optional[str]:
        if info.get('url'):
            return info['url']
        # merged formats carry the URL on the requested formats instead
        for fmt in info.get('requested_formats') or []:
            if fmt.get('vcodec') not in (None, 'none') and fmt.get('url'):
                return fmt['url']
        return None
