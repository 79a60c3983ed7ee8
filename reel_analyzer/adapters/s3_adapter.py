"""
AWS S3 adapter for thumbnail frames.

Hosts the first sampled frame in S3 so the thumbnail URL handed to the
app never expires the way social CDN links do.
"""

import boto3
import logging
from typing import Optional
from botocore.exceptions import ClientError

from .base import FrameStoreAdapter

logger = logging.getLogger("reel_analyzer")


class S3FrameStore(FrameStoreAdapter):
    """AWS S3 implementation of the frame store"""

    def __init__(self, bucket: str, region: str = "us-east-1", prefix: str = "reel-thumbnails/",
                 public_base_url: Optional[str] = None):
        self.bucket = bucket
        self.region = region
        self.prefix = prefix
        self.public_base_url = public_base_url
        self.s3 = None

    def connect(self):
        """Initialize S3 client"""
        try:
            self.s3 = boto3.client('s3', region_name=self.region)
            logger.info(f"S3 frame store connected to bucket: {self.bucket}")
        except Exception as e:
            logger.error(f"Failed to connect to S3: {e}")
            raise

    def store_frame(self, key: str, image_bytes: bytes) -> str:
        """Upload a JPEG frame and return its public URL"""
        object_key = f"{self.prefix}{key}.jpg"
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=image_bytes,
                ContentType='image/jpeg',
                CacheControl='public, max-age=31536000'
            )
            logger.info(f"Stored thumbnail frame {object_key} in S3")
        except ClientError as e:
            logger.error(f"Error storing thumbnail frame {object_key}: {e}")
            raise

        return self.public_url(object_key)

    def public_url(self, object_key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{object_key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{object_key}"
