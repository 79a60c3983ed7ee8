import logging
from typing import List, Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from ..errors import ClassificationError
from ..models import ClassificationSignal
from .util import extract_json_object, json_schema_response_format, clean_text

logger = logging.getLogger("reel_analyzer")


class MetadataVerdict(BaseModel):
    """Structured output from the caption classifier"""
    activity: Optional[str] = Field(description="Travel activity described by the post, or null")
    location: Optional[str] = Field(description="Place or destination named by the post, or null")
    confidence: float = Field(description="Confidence score 0-1")


SYSTEM_PROMPT = (
    "You classify social media travel content from its caption, hashtags and location tag. "
    "Respond in the exact JSON format requested."
)

PROMPT_TEMPLATE = """Caption: "{caption}"
Hashtags: {hashtags}
Location tag: {location_tag}

Decide whether this post shows a qualifying travel, adventure or cultural ACTIVITY
(e.g. surfing, hiking, scuba diving, cooking class, wine tasting) or a travel DESTINATION.

Rules:
1. activity: the specific activity name if one is clearly described, otherwise null.
2. Home life, shopping, everyday errands and ordinary restaurant meals are NOT activities: use null.
3. location: the destination, city or country if identifiable, otherwise null.
4. confidence: how certain you are, from 0.0 to 1.0.

Respond with JSON:
{{"activity": <string or null>, "location": <string or null>, "confidence": <float 0.0-1.0>}}"""


class MetadataClassifier:
    """Text-only first-pass classification of caption metadata"""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: str = "gpt-4o-mini"):
        self._client = client
        self.model = model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI()
        return self._client

    async def classify(self, caption: str, hashtags: List[str], location_tag: Optional[str]) -> ClassificationSignal:
        """
        Classify post metadata; never raises.

        Returns:
            ClassificationSignal, or a zero-confidence no-opinion signal when
            there is no text to classify or the call fails
        """
        caption = (caption or "").strip()
        hashtags = [tag for tag in (hashtags or []) if tag and tag.strip()]
        location_tag = clean_text(location_tag)

        if not caption and not hashtags and not location_tag:
            logger.info("CLASSIFY: No caption metadata, skipping text classification")
            return ClassificationSignal.no_opinion()

        try:
            verdict = await self._request_verdict(caption, hashtags, location_tag)
        except Exception as e:
            logger.warning(f"CLASSIFY: Metadata classification failed: {e}")
            return ClassificationSignal.no_opinion()

        activity = clean_text(verdict.activity)
        signal = ClassificationSignal(
            kind="activity" if activity else "irrelevant",
            activity=activity,
            location=clean_text(verdict.location),
            confidence=verdict.confidence
        )
        logger.info(f"CLASSIFY: Metadata signal {signal}")
        return signal

    async def _request_verdict(self, caption: str, hashtags: List[str], location_tag: Optional[str]) -> MetadataVerdict:
        prompt = PROMPT_TEMPLATE.format(
            caption=caption[:2000],
            hashtags=", ".join(hashtags[:30]) or "none",
            location_tag=location_tag or "none"
        )

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            response_format=json_schema_response_format("metadata_classification", MetadataVerdict),
            temperature=0.2
        )

        try:
            content = response.choices[0].message.content
            return MetadataVerdict.model_validate(extract_json_object(content))
        except Exception as e:
            raise ClassificationError(f"Unparseable metadata classification: {e}")
