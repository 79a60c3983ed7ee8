from typing import List, Optional

from ..models import Frame
from .util import image_data_uri

# signed CDN links from these hosts expire within hours
EXPIRING_CDN_MARKERS = ("cdninstagram", "fbcdn", "tiktokcdn")


def is_expiring_url(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in EXPIRING_CDN_MARKERS)


def select_thumbnail(frames: List[Frame], provider_thumbnail_url: Optional[str]) -> Optional[str]:
    """
    Choose a durable thumbnail for the analysis.

    The first sampled frame wins (hosted URL if it was uploaded, else an
    inline data URI). A provider thumbnail is only used when it does not
    point at an expiring CDN.
    """
    if frames:
        first = frames[0]
        return first.hosted_url or image_data_uri(first.image_bytes)

    if provider_thumbnail_url and not is_expiring_url(provider_thumbnail_url):
        return provider_thumbnail_url

    return None
