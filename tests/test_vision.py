"""
Tests for the vision classifier worker pool and best-of reduction.
"""
import asyncio
import json
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from reel_analyzer.errors import VisionError
from reel_analyzer.models import ClassificationSignal, Frame
from reel_analyzer.pipeline.vision import VisionClassifier, best_frame_signal


def _make_response(payload):
    content = payload if isinstance(payload, str) else json.dumps(payload)
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _make_client(*results):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=list(results))
    return client


def _make_frames(count):
    return [Frame(index=i, image_bytes=b"jpeg-%d" % i) for i in range(count)]


class TestBestFrameSignal:
    """Tests for the highest-confidence reduction."""

    def test_highest_confidence_wins(self):
        results = [
            ClassificationSignal(kind="irrelevant", confidence=0.2),
            ClassificationSignal(kind="activity", activity="surfing", confidence=0.9),
            ClassificationSignal(kind="landscape", location="Bali", confidence=0.5),
        ]

        best = best_frame_signal(results)

        assert best.kind == "activity"
        assert best.activity == "surfing"
        assert best.confidence == 0.9

    def test_tie_keeps_earliest_frame(self):
        results = [
            ClassificationSignal(kind="landscape", location="Alps", confidence=0.7),
            ClassificationSignal(kind="activity", activity="skiing", confidence=0.7),
        ]

        assert best_frame_signal(results).location == "Alps"

    def test_failed_slots_are_skipped(self):
        results = [None, ClassificationSignal(kind="activity", activity="yoga", confidence=0.4), None]

        assert best_frame_signal(results).activity == "yoga"

    def test_all_failed(self):
        assert best_frame_signal([None, None]) is None


class TestClassifyFrames:
    """Tests for classify_frames."""

    @pytest.mark.asyncio
    async def test_returns_most_confident_frame(self):
        client = _make_client(
            _make_response({"type": "irrelevant", "activity": None, "location": None, "confidence": 0.2}),
            _make_response({"type": "activity", "activity": "surfing", "location": "Bali", "confidence": 0.9}),
            _make_response({"type": "landscape", "activity": None, "location": "Bali", "confidence": 0.5}),
        )
        classifier = VisionClassifier(client, max_concurrent=1)

        result = await classifier.classify_frames(_make_frames(3))

        assert result.kind == "activity"
        assert result.activity == "surfing"
        assert result.location == "Bali"
        assert result.confidence == 0.9
        assert client.chat.completions.create.await_count == 3

    @pytest.mark.asyncio
    async def test_result_independent_of_completion_order(self):
        replies = {
            1: {"type": "irrelevant", "activity": None, "location": None, "confidence": 0.2},
            2: {"type": "activity", "activity": "surfing", "location": None, "confidence": 0.9},
            3: {"type": "landscape", "activity": None, "location": "Bali", "confidence": 0.5},
            4: {"type": "activity", "activity": "swimming", "location": None, "confidence": 0.9},
        }
        completed = []

        async def create(**kwargs):
            text = kwargs["messages"][0]["content"][0]["text"]
            frame_number = int(text.split("This is frame ")[1].split(" ")[0])
            # later frames finish first
            await asyncio.sleep(0.01 * (len(replies) - frame_number + 1))
            completed.append(frame_number)
            return _make_response(replies[frame_number])

        client = MagicMock()
        client.chat.completions.create = create
        classifier = VisionClassifier(client, max_concurrent=4)

        result = await classifier.classify_frames(_make_frames(4))

        assert completed == [4, 3, 2, 1]
        assert result.activity == "surfing"
        assert result.confidence == 0.9

    @pytest.mark.asyncio
    async def test_partial_failures_are_excluded(self):
        client = _make_client(
            RuntimeError("rate limited"),
            _make_response("not json at all"),
            _make_response({"type": "landscape", "activity": None, "location": "Petra", "confidence": 0.6}),
        )
        classifier = VisionClassifier(client, max_concurrent=1)

        result = await classifier.classify_frames(_make_frames(3))

        assert result.kind == "landscape"
        assert result.location == "Petra"

    @pytest.mark.asyncio
    async def test_all_failures_raise_vision_error(self):
        client = _make_client(RuntimeError("down"), RuntimeError("down"))
        classifier = VisionClassifier(client)

        with pytest.raises(VisionError):
            await classifier.classify_frames(_make_frames(2))

    @pytest.mark.asyncio
    async def test_no_frames_raise_vision_error(self):
        classifier = VisionClassifier(_make_client())

        with pytest.raises(VisionError):
            await classifier.classify_frames([])

    @pytest.mark.asyncio
    async def test_activity_dropped_for_non_activity_type(self):
        client = _make_client(
            _make_response({"type": "landscape", "activity": "hiking", "location": "Zion", "confidence": 0.8}),
        )
        classifier = VisionClassifier(client)

        result = await classifier.classify_frames(_make_frames(1))

        assert result.kind == "landscape"
        assert result.activity is None

    @pytest.mark.asyncio
    async def test_out_of_range_confidence_is_clamped(self):
        client = _make_client(
            _make_response({"type": "activity", "activity": "diving", "location": None, "confidence": 7}),
        )
        classifier = VisionClassifier(client)

        result = await classifier.classify_frames(_make_frames(1))

        assert result.confidence == 1.0

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        in_flight = 0
        peak = 0

        async def create(**kwargs):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return _make_response({"type": "irrelevant", "activity": None, "location": None, "confidence": 0.1})

        client = MagicMock()
        client.chat.completions.create = create
        classifier = VisionClassifier(client, max_concurrent=2)

        await classifier.classify_frames(_make_frames(6))

        assert peak == 2

    @pytest.mark.asyncio
    async def test_prompt_names_frame_position_and_image(self):
        client = _make_client(
            _make_response({"type": "irrelevant", "activity": None, "location": None, "confidence": 0.1}),
        )
        classifier = VisionClassifier(client, model="gpt-4o")

        await classifier.classify_frames(_make_frames(1))

        kwargs = client.chat.completions.create.await_args.kwargs
        content = kwargs["messages"][0]["content"]
        assert kwargs["model"] == "gpt-4o"
        assert "frame 1 of 1" in content[0]["text"]
        assert content[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")
        assert kwargs["response_format"]["json_schema"]["strict"] is True
