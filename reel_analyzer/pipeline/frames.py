import io
import os
import asyncio
import logging
from typing import List

import ffmpeg
from PIL import Image

from ..errors import ExtractionError
from ..models import Frame
from .util import scratch_dir

logger = logging.getLogger("reel_analyzer")

# seeking exactly to the end of a stream yields no frame
END_SEEK_MARGIN_SEC = 0.1


def evenly_spaced_timestamps(duration: float, count: int) -> List[float]:
    """
    Timestamps spread evenly over the video, first and last position included

    Returns:
        List of count timestamps in seconds, ascending
    """
    if count < 1:
        raise ValueError("count must be at least 1")

    last = max(0.0, duration - END_SEEK_MARGIN_SEC)
    if count == 1 or last == 0.0:
        return [0.0] * count

    step = last / (count - 1)
    return [round(step * i, 3) for i in range(count)]


def probe_duration(video_path: str) -> float:
    """Get video duration in seconds from the container, then the video stream"""
    probe = ffmpeg.probe(video_path)

    duration = (probe.get('format') or {}).get('duration')
    if duration is None:
        video_stream = next(
            (stream for stream in probe.get('streams', []) if stream.get('codec_type') == 'video'),
            None
        )
        if video_stream is None:
            raise ExtractionError(f"No video stream in {video_path}")
        duration = video_stream.get('duration', 0)

    return float(duration)


class FrameSampler:
    """Extracts evenly spaced still frames from a video buffer"""

    def __init__(self, scratch_root: str, default_count: int = 3, max_width: int = 1280):
        self.scratch_root = scratch_root
        self.default_count = default_count
        self.max_width = max_width

    async def sample(self, video_bytes: bytes, count: int = None) -> List[Frame]:
        """
        Sample frames without blocking the event loop.

        Returns:
            Frames ordered by index, index 0 being the earliest

        Raises:
            ExtractionError: if the video cannot be decoded
        """
        count = count or self.default_count
        return await asyncio.to_thread(self.sample_sync, video_bytes, count)

    def sample_sync(self, video_bytes: bytes, count: int) -> List[Frame]:
        os.makedirs(self.scratch_root, exist_ok=True)

        # cleanup lives in this thread so it still runs if the awaiting task is cancelled
        with scratch_dir(self.scratch_root) as work_dir:
            video_path = os.path.join(work_dir, "video.mp4")
            with open(video_path, 'wb') as video_file:
                video_file.write(video_bytes)

            try:
                duration = probe_duration(video_path)
            except ExtractionError:
                raise
            except ffmpeg.Error as e:
                raise ExtractionError(f"FFprobe error: {self._stderr(e)}")
            except Exception as e:
                raise ExtractionError(f"Error probing video: {str(e)}")

            timestamps = evenly_spaced_timestamps(duration, count)
            logger.info(f"FRAMES: Extracting {count} frames from {duration:.2f}s video at {timestamps}")

            frames = []
            for index, timestamp in enumerate(timestamps):
                frame_path = os.path.join(work_dir, f"frame_{index:03d}.jpg")
                self._extract_frame(video_path, timestamp, frame_path)
                frames.append(Frame(
                    index=index,
                    image_bytes=self._load_frame(frame_path),
                    timestamp=timestamp
                ))

            return frames

    def _extract_frame(self, video_path: str, timestamp: float, frame_path: str) -> None:
        try:
            (
                ffmpeg
                .input(video_path, ss=timestamp)
                .output(frame_path, vframes=1, format='image2', vcodec='mjpeg', **{'q:v': 2})
                .overwrite_output()
                .run(quiet=True)
            )
        except ffmpeg.Error as e:
            raise ExtractionError(f"FFmpeg error extracting frame at {timestamp:.2f}s: {self._stderr(e)}")

        if not os.path.exists(frame_path):
            raise ExtractionError(f"No frame produced at {timestamp:.2f}s")

    def _load_frame(self, frame_path: str) -> bytes:
        """Validate the extracted image and re-encode it, downsized to max_width"""
        try:
            with Image.open(frame_path) as img:
                img = img.convert('RGB')
                if img.width > self.max_width:
                    height = round(img.height * self.max_width / img.width)
                    img = img.resize((self.max_width, height))
                buffer = io.BytesIO()
                img.save(buffer, format='JPEG', quality=90)
                return buffer.getvalue()
        except Exception as e:
            raise ExtractionError(f"Invalid frame image {os.path.basename(frame_path)}: {e}")

    @staticmethod
    def _stderr(error: ffmpeg.Error) -> str:
        return error.stderr.decode(errors='replace') if error.stderr else str(error)
