"""
Domain models for the reel analyzer.

Defines the core data structures passed between pipeline stages,
from downloaded content through to the verdict returned to callers.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List


SIGNAL_KINDS = ("activity", "landscape", "irrelevant")
RESULT_TYPES = ("activity", "landscape", "boring", "irrelevant")


def clamp_confidence(value: Any) -> float:
    """Coerce a classifier confidence into [0, 1]; unusable values become 0"""
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if confidence != confidence:  # NaN
        return 0.0
    return max(0.0, min(1.0, confidence))


@dataclass
class RawContent:
    """Downloaded post content, never persisted"""
    video_bytes: bytes
    caption: str = ""
    hashtags: List[str] = field(default_factory=list)
    location_tag: Optional[str] = None
    provider_thumbnail_url: Optional[str] = None
    platform: Optional[str] = None
    provider: Optional[str] = None


@dataclass
class Frame:
    """A still frame sampled from the video"""
    index: int
    image_bytes: bytes
    timestamp: float = 0.0
    hosted_url: Optional[str] = None


@dataclass(frozen=True)
class ClassificationSignal:
    """Output of the metadata classifier or of the vision classifier"""
    kind: str
    activity: Optional[str] = None
    location: Optional[str] = None
    confidence: float = 0.0

    def __post_init__(self):
        if self.kind not in SIGNAL_KINDS:
            raise ValueError(f"Unknown signal kind: {self.kind}")
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    @classmethod
    def no_opinion(cls) -> 'ClassificationSignal':
        return cls(kind="irrelevant", activity=None, location=None, confidence=0.0)


@dataclass(frozen=True)
class MergedResult:
    """Merged classification, before and after the admission gates"""
    type: str
    activity: Optional[str] = None
    location: Optional[str] = None
    confidence: float = 0.0
    source: str = "metadata"

    def __post_init__(self):
        if self.type not in RESULT_TYPES:
            raise ValueError(f"Unknown result type: {self.type}")
        if self.type not in ("activity", "boring"):
            object.__setattr__(self, "activity", None)
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))


@dataclass(frozen=True)
class FinalAnalysis:
    """The verdict returned to callers"""
    type: str
    activity: Optional[str]
    location: Optional[str]
    confidence: float
    source: str
    thumbnail_url: Optional[str] = None
    success: bool = True

    @classmethod
    def from_merged(cls, merged: MergedResult, thumbnail_url: Optional[str]) -> 'FinalAnalysis':
        return cls(
            type=merged.type,
            # boring keeps its activity on the merged result for audit logs only
            activity=merged.activity if merged.type == "activity" else None,
            location=merged.location,
            confidence=merged.confidence,
            source=merged.source,
            thumbnail_url=thumbnail_url,
            success=True
        )

    @classmethod
    def timed_out(cls) -> 'FinalAnalysis':
        return cls(
            type="irrelevant",
            activity=None,
            location=None,
            confidence=0.0,
            source="error",
            thumbnail_url=None,
            success=True
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON representation consumed by the app"""
        return {
            'success': self.success,
            'type': self.type,
            'activity': self.activity,
            'location': self.location,
            'confidence': self.confidence,
            'source': self.source,
            'thumbnailUrl': self.thumbnail_url
        }
