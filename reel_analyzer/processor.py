"""
Reel analysis pipeline.

Runs one post URL through fetch, sampling, classification, merge,
admission and thumbnail selection. Only fetch and sampling failures are
fatal; every later stage degrades to a default.
"""

import time
import uuid
import asyncio
import logging
from typing import List, Optional

from .adapters.base import FrameStoreAdapter
from .errors import run_fail_open
from .models import ClassificationSignal, FinalAnalysis, Frame
from .pipeline.admission import AdmissionFilter
from .pipeline.fetch import ContentFetcher
from .pipeline.frames import FrameSampler
from .pipeline.merge import merge_signals
from .pipeline.metadata import MetadataClassifier
from .pipeline.thumbnail import select_thumbnail
from .pipeline.vision import VisionClassifier

logger = logging.getLogger("reel_analyzer")


class VideoAnalyzer:
    """Handles reel analysis pipeline execution"""

    def __init__(
        self,
        fetcher: ContentFetcher,
        sampler: FrameSampler,
        metadata_classifier: MetadataClassifier,
        vision_classifier: VisionClassifier,
        admission: AdmissionFilter,
        frame_store: Optional[FrameStoreAdapter] = None
    ):
        self.fetcher = fetcher
        self.sampler = sampler
        self.metadata_classifier = metadata_classifier
        self.vision_classifier = vision_classifier
        self.admission = admission
        self.frame_store = frame_store

    async def analyze(self, post_url: str) -> FinalAnalysis:
        """
        Analyze a single post.

        Args:
            post_url: Public Instagram or TikTok post URL

        Returns:
            FinalAnalysis verdict

        Raises:
            DownloadError: if no provider yields the video
            ExtractionError: if the video cannot be sampled
        """
        start_time = time.time()

        logger.info(f"FETCH: Starting fetch for {post_url}")
        content = await self.fetcher.fetch(post_url)

        # metadata classification overlaps with frame sampling
        metadata_task = asyncio.create_task(
            self.metadata_classifier.classify(content.caption, content.hashtags, content.location_tag)
        )
        try:
            logger.info(f"FRAMES: Sampling frames from {len(content.video_bytes)} bytes of video")
            frames = await self.sampler.sample(content.video_bytes)

            logger.info(f"CLASSIFY: Classifying {len(frames)} frames")
            vision_signal = await run_fail_open(
                "CLASSIFY: Vision classification",
                self.vision_classifier.classify_frames(frames),
                ClassificationSignal.no_opinion()
            )
            metadata_signal = await metadata_task
        finally:
            if not metadata_task.done():
                metadata_task.cancel()

        merged = merge_signals(metadata_signal, vision_signal)
        logger.info(f"MERGE: metadata={metadata_signal} vision={vision_signal} -> {merged}")

        admitted = await self.admission.admit(merged)
        if admitted != merged:
            logger.info(f"GATES: Downgraded to {admitted}")

        await self._host_first_frame(frames)
        thumbnail_url = select_thumbnail(frames, content.provider_thumbnail_url)

        analysis = FinalAnalysis.from_merged(admitted, thumbnail_url)
        processing_time = time.time() - start_time
        logger.info(
            f"DONE: {post_url} -> {analysis.type} "
            f"(activity={analysis.activity}, location={analysis.location}, "
            f"confidence={analysis.confidence:.2f}, source={analysis.source}) in {processing_time:.2f}s"
        )
        return analysis

    async def _host_first_frame(self, frames: List[Frame]) -> None:
        """Upload the thumbnail frame when a frame store is configured"""
        if self.frame_store is None or not frames:
            return

        first = frames[0]
        key = uuid.uuid4().hex
        first.hosted_url = await run_fail_open(
            "THUMBNAIL: Frame upload",
            asyncio.to_thread(self.frame_store.store_frame, key, first.image_bytes),
            None
        )
