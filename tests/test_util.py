"""
Tests for pipeline helpers.
"""
import os
import pytest
from typing import Optional

from pydantic import BaseModel

from reel_analyzer.pipeline.util import (
    clean_text,
    detect_platform,
    extract_hashtags,
    extract_instagram_shortcode,
    extract_json_object,
    json_schema_response_format,
    scratch_dir,
)


class TestDetectPlatform:
    """Tests for detect_platform."""

    def test_instagram(self):
        assert detect_platform("https://www.instagram.com/reel/C8xYz/") == "instagram"

    def test_tiktok(self):
        assert detect_platform("https://www.tiktok.com/@user/video/123") == "tiktok"
        assert detect_platform("https://vm.tiktok.com/ZMabc/") == "tiktok"

    def test_unsupported(self):
        assert detect_platform("https://youtube.com/watch?v=1") is None
        assert detect_platform("") is None


class TestShortcode:
    """Tests for extract_instagram_shortcode."""

    @pytest.mark.parametrize("url,code", [
        ("https://www.instagram.com/reel/C8xYz_1/", "C8xYz_1"),
        ("https://www.instagram.com/p/ABC123/?igsh=xyz", "ABC123"),
        ("https://instagram.com/reels/DEF456", "DEF456"),
        ("https://www.instagram.com/tv/GHI789#top", "GHI789"),
    ])
    def test_shortcodes(self, url, code):
        assert extract_instagram_shortcode(url) == code

    def test_profile_url(self):
        assert extract_instagram_shortcode("https://www.instagram.com/someone/") is None


class TestExtractHashtags:
    """Tests for extract_hashtags."""

    def test_order_and_dedup(self):
        caption = "Dawn #surf in #Ericeira #SURF #portugal"

        assert extract_hashtags(caption) == ["#surf", "#Ericeira", "#portugal"]

    def test_accented_tags(self):
        assert extract_hashtags("#açaí bowls") == ["#açaí"]

    def test_empty(self):
        assert extract_hashtags("") == []
        assert extract_hashtags(None) == []


class TestExtractJsonObject:
    """Tests for extract_json_object."""

    def test_plain(self):
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_fenced(self):
        assert extract_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    @pytest.mark.parametrize("content", [None, "", "no json here"])
    def test_invalid(self, content):
        with pytest.raises(ValueError):
            extract_json_object(content)


def test_response_format_is_strict():
    class Verdict(BaseModel):
        activity: Optional[str]
        confidence: float

    response_format = json_schema_response_format("verdict", Verdict)

    assert response_format["type"] == "json_schema"
    assert response_format["json_schema"]["strict"] is True
    assert response_format["json_schema"]["schema"]["additionalProperties"] is False


@pytest.mark.parametrize("value,expected", [
    (None, None), ("", None), ("  null ", None), ("Unknown", None), ("N/A", None), (" Bali ", "Bali"),
])
def test_clean_text(value, expected):
    assert clean_text(value) == expected


class TestScratchDir:
    """Tests for scratch_dir."""

    def test_removed_after_use(self, tmp_path):
        with scratch_dir(str(tmp_path)) as path:
            assert os.path.isdir(path)
            open(os.path.join(path, "video.mp4"), "wb").close()

        assert not os.path.exists(path)

    def test_removed_on_error(self, tmp_path):
        with pytest.raises(RuntimeError):
            with scratch_dir(str(tmp_path)) as path:
                raise RuntimeError("decode failed")

        assert not os.path.exists(path)

    def test_unique_per_call(self, tmp_path):
        with scratch_dir(str(tmp_path)) as first, scratch_dir(str(tmp_path)) as second:
            assert first != second
