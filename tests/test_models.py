"""
Tests for domain models.
"""
import pytest

from reel_analyzer.models import ClassificationSignal, FinalAnalysis, MergedResult, clamp_confidence


class TestConfidence:
    """Tests for confidence clamping."""

    @pytest.mark.parametrize("value,expected", [
        (0.5, 0.5), (-1, 0.0), (3, 1.0), ("0.25", 0.25), (None, 0.0), ("abc", 0.0), (float("nan"), 0.0),
    ])
    def test_clamp(self, value, expected):
        assert clamp_confidence(value) == expected


class TestSignals:
    """Tests for ClassificationSignal and MergedResult invariants."""

    def test_no_opinion(self):
        signal = ClassificationSignal.no_opinion()

        assert signal.kind == "irrelevant"
        assert signal.activity is None
        assert signal.confidence == 0.0

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            ClassificationSignal(kind="boring")

    def test_merged_drops_activity_for_landscape(self):
        merged = MergedResult(type="landscape", activity="hiking", location="Zion", confidence=0.8)

        assert merged.activity is None

    def test_merged_keeps_activity_for_boring(self):
        merged = MergedResult(type="boring", activity="bar crawl", confidence=1.0, source="boring-check")

        assert merged.activity == "bar crawl"


class TestFinalAnalysis:
    """Tests for FinalAnalysis."""

    def test_from_merged_activity(self):
        merged = MergedResult(type="activity", activity="surfing", location="Bali", confidence=0.9)

        analysis = FinalAnalysis.from_merged(merged, "https://cdn.example.com/t.jpg")

        assert analysis.to_dict() == {
            'success': True,
            'type': 'activity',
            'activity': 'surfing',
            'location': 'Bali',
            'confidence': 0.9,
            'source': 'metadata',
            'thumbnailUrl': 'https://cdn.example.com/t.jpg'
        }

    def test_from_merged_boring_hides_activity(self):
        merged = MergedResult(type="boring", activity="casino", confidence=1.0, source="boring-check")

        analysis = FinalAnalysis.from_merged(merged, None)

        assert analysis.type == "boring"
        assert analysis.activity is None

    def test_timed_out(self):
        assert FinalAnalysis.timed_out().to_dict() == {
            'success': True,
            'type': 'irrelevant',
            'activity': None,
            'location': None,
            'confidence': 0.0,
            'source': 'error',
            'thumbnailUrl': None
        }
