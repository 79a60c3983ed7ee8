"""
Tests for thumbnail selection.
"""
from reel_analyzer.models import Frame
from reel_analyzer.pipeline.thumbnail import is_expiring_url, select_thumbnail


def _frame(index=0, hosted_url=None):
    return Frame(index=index, image_bytes=b"\xff\xd8jpeg", hosted_url=hosted_url)


class TestSelectThumbnail:
    """Tests for select_thumbnail."""

    def test_first_frame_as_data_uri(self):
        url = select_thumbnail([_frame(0), _frame(1)], "https://example.com/thumb.jpg")

        assert url.startswith("data:image/jpeg;base64,")

    def test_hosted_first_frame_preferred(self):
        frames = [_frame(0, hosted_url="https://bucket.s3.amazonaws.com/a.jpg"), _frame(1)]

        assert select_thumbnail(frames, None) == "https://bucket.s3.amazonaws.com/a.jpg"

    def test_durable_provider_url_without_frames(self):
        assert select_thumbnail([], "https://images.example.com/thumb.jpg") == "https://images.example.com/thumb.jpg"

    def test_expiring_provider_url_is_never_returned(self):
        for url in (
            "https://scontent.cdninstagram.com/v/t51/abc.jpg?oe=123",
            "https://scontent-lis1-1.xx.fbcdn.net/v/abc.jpg",
            "https://p16-sign.tiktokcdn.com/obj/abc.jpeg",
        ):
            assert select_thumbnail([], url) is None

    def test_nothing_available(self):
        assert select_thumbnail([], None) is None
        assert select_thumbnail([], "") is None


def test_is_expiring_url_ignores_case():
    assert is_expiring_url("https://SCONTENT.CDNINSTAGRAM.COM/x.jpg")
    assert not is_expiring_url("https://cdn.example.com/x.jpg")
