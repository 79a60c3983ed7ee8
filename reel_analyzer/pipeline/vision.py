import asyncio
import logging
import time
from typing import List, Literal, Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from ..errors import ClassificationError, VisionError
from ..models import ClassificationSignal, Frame
from .util import extract_json_object, json_schema_response_format, image_data_uri, clean_text

logger = logging.getLogger("reel_analyzer")


class FrameVerdict(BaseModel):
    """Structured output from frame classification"""
    type: Literal["activity", "landscape", "irrelevant"] = Field(
        description="activity if someone is doing a travel activity, landscape for a scenic destination, otherwise irrelevant"
    )
    activity: Optional[str] = Field(description="Activity name (e.g. surfing, rock climbing), or null")
    location: Optional[str] = Field(description="Recognizable place, landmark or country, or null")
    confidence: float = Field(description="Confidence score 0-1")


FRAME_PROMPT = """This is frame {frame_number} of {total_frames} from a short travel video shared on Instagram or TikTok.

Classify the frame:
- "activity": a person doing a travel or adventure activity (surfing, yoga, climbing, diving, ...).
  Give the specific activity name.
- "landscape": a scenic destination (waterfall, desert, canyon, beach, national park, ...).
  Give the place name, with the country if identifiable.
- "irrelevant": anything else (home, shopping, selfies, food close-ups, text screens, ...).

Respond with JSON only:
{{"type": "activity" | "landscape" | "irrelevant", "activity": <string or null>, "location": <string or null>, "confidence": <float 0.0-1.0>}}"""


def best_frame_signal(results: List[Optional[ClassificationSignal]]) -> Optional[ClassificationSignal]:
    """
    Pick the single frame result with the highest confidence.

    Ties keep the earliest frame since only a strictly greater confidence
    replaces the current best. Empty slots (failed frames) are skipped.
    """
    best = None
    for result in results:
        if result is None:
            continue
        if best is None or result.confidence > best.confidence:
            best = result
    return best


class VisionClassifier:
    """Per-frame vision classification with a bounded worker pool"""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: str = "gpt-4o", max_concurrent: int = 10):
        self._client = client
        self.model = model
        self.max_concurrent = max_concurrent

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI()
        return self._client

    async def classify_frames(self, frames: List[Frame]) -> ClassificationSignal:
        """
        Classify every frame and reduce to the most confident result.

        Raises:
            VisionError: if no frame produced a parseable result
        """
        if not frames:
            raise VisionError("No frames to classify")

        start_time = time.time()
        results: List[Optional[ClassificationSignal]] = [None] * len(frames)

        queue: asyncio.Queue = asyncio.Queue()
        for position in range(len(frames)):
            queue.put_nowait(position)

        async def worker():
            while True:
                try:
                    position = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                results[position] = await self._classify_safely(frames[position], len(frames))

        worker_count = min(self.max_concurrent, len(frames))
        logger.info(f"CLASSIFY: Vision analysis of {len(frames)} frames with {worker_count} workers")
        await asyncio.gather(*(worker() for _ in range(worker_count)))

        best = best_frame_signal(results)
        elapsed = time.time() - start_time
        succeeded = sum(1 for result in results if result is not None)

        if best is None:
            raise VisionError(f"All {len(frames)} frame classifications failed")

        logger.info(f"CLASSIFY: Vision completed in {elapsed:.2f}s ({succeeded}/{len(frames)} frames), best {best}")
        return best

    async def _classify_safely(self, frame: Frame, total_frames: int) -> Optional[ClassificationSignal]:
        try:
            return await self.classify_frame(frame, total_frames)
        except Exception as e:
            logger.warning(f"CLASSIFY: Frame {frame.index} classification failed: {e}")
            return None

    async def classify_frame(self, frame: Frame, total_frames: int) -> ClassificationSignal:
        """Run one vision call for a single frame"""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "text",
                            "text": FRAME_PROMPT.format(frame_number=frame.index + 1, total_frames=total_frames)
                        },
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": image_data_uri(frame.image_bytes)
                            }
                        }
                    ]
                }
            ],
            response_format=json_schema_response_format("frame_classification", FrameVerdict),
            max_tokens=300,
            temperature=0.3
        )

        try:
            content = response.choices[0].message.content
            verdict = FrameVerdict.model_validate(extract_json_object(content))
        except Exception as e:
            raise ClassificationError(f"Unparseable frame classification: {e}")

        return ClassificationSignal(
            kind=verdict.type,
            activity=clean_text(verdict.activity) if verdict.type == "activity" else None,
            location=clean_text(verdict.location),
            confidence=verdict.confidence
        )
