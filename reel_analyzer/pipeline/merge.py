"""
Decision policy combining the metadata and vision signals.

Pure function, no I/O. Rules apply in strict precedence; the first one
that fires decides the result.
"""

from ..models import ClassificationSignal, MergedResult

METADATA_TRUST_THRESHOLD = 0.7
LOCATION_OVERRIDE_MIN_CONFIDENCE = 0.8


def merge_signals(metadata: ClassificationSignal, vision: ClassificationSignal) -> MergedResult:
    """
    Merge the caption-metadata signal with the best vision signal.

    1. A known location overrides an irrelevant vision verdict: landscape.
    2. Metadata activity at or above the trust threshold wins outright.
    3. Otherwise the more confident vision signal wins.
    4. Otherwise metadata wins, with its type re-derived.

    A zero-confidence vision signal is "no opinion" (every frame failed),
    not an irrelevant verdict, so it never triggers the location override.
    """
    merged_location = metadata.location or vision.location

    if merged_location and vision.kind == "irrelevant" and vision.confidence > 0:
        return MergedResult(
            type="landscape",
            activity=None,
            location=merged_location,
            confidence=max(vision.confidence, LOCATION_OVERRIDE_MIN_CONFIDENCE),
            source="metadata" if metadata.location else "frames"
        )

    if metadata.activity and metadata.confidence >= METADATA_TRUST_THRESHOLD:
        return MergedResult(
            type="activity",
            activity=metadata.activity,
            location=merged_location,
            confidence=metadata.confidence,
            source="metadata"
        )

    if vision.confidence > metadata.confidence:
        return MergedResult(
            type=vision.kind,
            activity=vision.activity if vision.kind == "activity" else None,
            location=merged_location,
            confidence=vision.confidence,
            source="frames"
        )

    if vision.kind == "landscape" or (not metadata.activity and merged_location):
        result_type = "landscape"
    else:
        result_type = "activity"

    return MergedResult(
        type=result_type,
        activity=metadata.activity if result_type == "activity" else None,
        location=merged_location,
        confidence=metadata.confidence,
        source="metadata"
    )
