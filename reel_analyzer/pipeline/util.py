import os
import re
import json
import shutil
import uuid
import base64
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Type

from pydantic import BaseModel


HASHTAG_PATTERN = re.compile(r'#[\w\u00C0-\u024F]+')
INSTAGRAM_SHORTCODE_PATTERN = re.compile(r'/(?:p|reel|reels|tv)/([^/?#]+)')
JSON_OBJECT_PATTERN = re.compile(r'\{[\s\S]*\}')


def detect_platform(url: str) -> Optional[str]:
    """Detect the social platform a post URL belongs to"""
    if not url:
        return None
    lower_url = url.lower()
    if 'tiktok.com' in lower_url or 'vm.tiktok' in lower_url:
        return 'tiktok'
    if 'instagram.com' in lower_url or 'instagr.am' in lower_url:
        return 'instagram'
    return None


def extract_instagram_shortcode(url: str) -> Optional[str]:
    """Extract the media shortcode from /p/, /reel/, /reels/ or /tv/ URLs"""
    match = INSTAGRAM_SHORTCODE_PATTERN.search(url or '')
    return match.group(1) if match else None


def extract_hashtags(caption: str) -> List[str]:
    """Scan a caption for #hashtags, keeping order and dropping repeats"""
    seen = set()
    hashtags = []
    for tag in HASHTAG_PATTERN.findall(caption or ''):
        if tag.lower() not in seen:
            seen.add(tag.lower())
            hashtags.append(tag)
    return hashtags


def extract_json_object(content: Optional[str]) -> Dict[str, Any]:
    """Parse the JSON object in a model reply, tolerating markdown fences"""
    if not content:
        raise ValueError("Empty model response")

    match = JSON_OBJECT_PATTERN.search(content)
    if not match:
        raise ValueError("No JSON object in model response")

    data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("Model response is not a JSON object")
    return data


def strict_json_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """Build a strict structured-output schema from a pydantic model"""
    schema = model.model_json_schema()

    # Add additionalProperties: false to all object definitions
    def add_additional_properties_false(schema_part):
        if isinstance(schema_part, dict):
            if schema_part.get("type") == "object":
                schema_part["additionalProperties"] = False
            for value in schema_part.values():
                add_additional_properties_false(value)
        elif isinstance(schema_part, list):
            for item in schema_part:
                add_additional_properties_false(item)

    add_additional_properties_false(schema)
    return schema


def json_schema_response_format(name: str, model: Type[BaseModel]) -> Dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "schema": strict_json_schema(model),
            "strict": True
        }
    }


def image_data_uri(image_bytes: bytes) -> str:
    """Encode JPEG bytes as a data URI"""
    return f"data:image/jpeg;base64,{base64.b64encode(image_bytes).decode('utf-8')}"


def clean_text(value: Any) -> Optional[str]:
    """Normalize optional model/provider strings; blanks and 'null' become None"""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in ('null', 'none', 'unknown', 'n/a'):
        return None
    return text


@contextmanager
def scratch_dir(root: str, prefix: str = "reel") -> Iterator[str]:
    """Per-request scratch directory, removed on every exit path"""
    path = os.path.join(root, f"{prefix}_{uuid.uuid4().hex}")
    os.makedirs(path, exist_ok=True)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
