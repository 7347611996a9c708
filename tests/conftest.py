"""Shared pytest fixtures for prediction-client tests."""

import json
import re
from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from prediction_client.config import Settings
from prediction_client.notifications import RecordingNotifier


# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Smallest byte sequence that still looks like a JPEG to a sniffer
FAKE_JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 64 + b"\xff\xd9"

FILENAME_RE = re.compile(rb'filename="([^"]+)"')


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def image_file(tmp_path) -> Path:
    """Write a small fake JPEG and return its path."""
    path = tmp_path / "capture.jpg"
    path.write_bytes(FAKE_JPEG)
    return path


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Notifier that records every message."""
    return RecordingNotifier()


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at the in-process test server."""
    return Settings(
        server="development",
        development_base_url="http://testserver/",
        poll_interval=0.5,
        lock_timeout=None,
    )


def detection_dict(
    label: str,
    confidence: float = 0.9,
    is_success: bool = True,
    description: str = "",
    with_box: bool = True,
) -> Dict:
    """Build one detection in the wire schema."""
    det = {
        "label": label,
        "confidence": confidence,
        "isSuccess": is_success,
        "description": description,
    }
    if with_box:
        det["bounding_box"] = {"x1": 10.0, "y1": 20.0, "x2": 110.0, "y2": 220.0}
    return det


def prediction_payload(filename: str, labels: List[str]) -> str:
    """Build a raw response body with MongoDB wrapper keys."""
    return json.dumps({
        "_id": {"$oid": "65f1c2a9e4b0a1b2c3d4e5f6"},
        "created_at": {"$date": "2024-03-13T10:15:00Z"},
        "filename": filename,
        "detections": [detection_dict(label) for label in labels],
    })


def uploaded_filename(request: httpx.Request) -> Optional[str]:
    """Extract the filename of the uploaded part from a multipart request."""
    match = FILENAME_RE.search(request.content)
    return match.group(1).decode() if match else None


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    """Create an httpx client answered by ``handler``."""
    return httpx.Client(transport=httpx.MockTransport(handler))


def locked_for(polls: int) -> Callable[[Path], bool]:
    """Lock probe reporting a held file for the first ``polls`` probes."""
    remaining = {"count": polls}

    def probe(path: Path) -> bool:
        if remaining["count"] > 0:
            remaining["count"] -= 1
            return True
        return False

    return probe
