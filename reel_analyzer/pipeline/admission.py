"""
Content admission gates applied after merging.

Gate A rejects bookable-but-boring activities, Gate B rejects activities
outside the taxonomy. Both gates only ever downgrade a result, and both
fail open: a gate that cannot reach a verdict lets the result through.
"""

import logging
from typing import Literal, Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from ..errors import GateError, run_fail_open
from ..models import MergedResult
from ..taxonomy import ActivityTaxonomy
from .util import extract_json_object, json_schema_response_format

logger = logging.getLogger("reel_analyzer")

BORING_KEYWORDS = (
    # transport and logistics
    'transfer', 'car rental', 'bike rental', 'bicycle rental', 'scooter rental',
    'segway', 'motorcycle rental', 'bus tour', 'coach tour', 'hop-on hop-off',
    'sightseeing bus', 'shuttle',
    # accommodation
    'hotel', 'resort stay', 'accommodation', 'hostel',
    # shopping
    'shopping', 'souvenir', 'outlet',
    # nightlife
    'night club', 'nightclub', 'bar tour', 'pub tour', 'bar crawl', 'pub crawl',
    'casino', 'gambling', 'karaoke',
    # novelty tours
    'tuk tuk', 'tuk-tuk', 'tuktuk', 'ghost tour', 'paranormal', 'astrology',
    'tarot', 'fortune telling',
)

BORING_CONFIDENCE = 1.0
REJECTED_CONFIDENCE = 0.1


class BoringVerdict(BaseModel):
    """Structured output from the boring check"""
    verdict: Literal["BORING", "EPIC"] = Field(
        description="BORING for logistics, nightlife, shopping or novelty tours, EPIC for a memorable experience"
    )


BORING_PROMPT = """Activity: "{activity}"

Is this a memorable experience worth booking on a trip (EPIC), or something
boring such as transport, rentals, hotels, shopping, nightlife, bar crawls,
casinos or novelty tours like ghost tours, tarot or tuk-tuk rides (BORING)?

Respond with JSON: {{"verdict": "BORING" | "EPIC"}}"""


def matches_boring_keyword(activity: str) -> bool:
    lowered = activity.lower()
    return any(keyword in lowered for keyword in BORING_KEYWORDS)


class BoringChecker:
    """Keyword denylist backed by a binary model verdict"""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: str = "gpt-4o-mini"):
        self._client = client
        self.model = model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI()
        return self._client

    async def is_boring(self, activity: str) -> bool:
        """
        Decide whether an activity is boring.

        Raises:
            GateError: if the model call fails or its answer cannot be parsed
        """
        if matches_boring_keyword(activity):
            logger.info(f"GATES: '{activity}' matches the boring denylist")
            return True

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": BORING_PROMPT.format(activity=activity)}],
                response_format=json_schema_response_format("boring_check", BoringVerdict),
                temperature=0
            )
            content = response.choices[0].message.content
            verdict = BoringVerdict.model_validate(extract_json_object(content))
        except Exception as e:
            raise GateError(f"Boring check failed for '{activity}': {e}", details={'activity': activity})

        return verdict.verdict == "BORING"


class AdmissionFilter:
    """Runs the boring gate then the taxonomy gate over a merged result"""

    def __init__(self, taxonomy: ActivityTaxonomy, boring_checker: BoringChecker):
        self.taxonomy = taxonomy
        self.boring_checker = boring_checker

    async def admit(self, merged: MergedResult) -> MergedResult:
        if merged.type != "activity":
            return merged

        # Gate A
        if merged.activity:
            boring = await run_fail_open("GATES: Boring check", self.boring_checker.is_boring(merged.activity), False)
            if boring:
                logger.info(f"GATES: Rejected boring activity '{merged.activity}'")
                return MergedResult(
                    type="boring",
                    activity=merged.activity,
                    location=None,
                    confidence=BORING_CONFIDENCE,
                    source="boring-check"
                )

        # Gate B
        allowed = await run_fail_open("GATES: Taxonomy check", self._check_taxonomy(merged.activity), True)
        if not allowed:
            logger.info(f"GATES: Activity '{merged.activity}' is not in the taxonomy")
            return MergedResult(
                type="irrelevant",
                activity=None,
                location=None,
                confidence=REJECTED_CONFIDENCE,
                source="validation"
            )

        return merged

    async def _check_taxonomy(self, activity: Optional[str]) -> bool:
        try:
            return self.taxonomy.matches(activity)
        except Exception as e:
            raise GateError(f"Taxonomy check failed for '{activity}': {e}", details={'activity': activity})
