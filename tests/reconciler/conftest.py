"""Shared fixtures for reconciler tests."""

import json
from pathlib import Path

import pytest


class FakeSniffer:
    """Type sniffer keyed by lowercase suffix, recording every call."""

    DESCRIPTIONS = {
        ".jpg": "JPEG image data, JFIF standard 1.01, resolution (DPI), density 72x72",
        ".jpeg": "JPEG image data, JFIF standard 1.01",
        ".png": "PNG image data, 640 x 480, 8-bit/color RGBA, non-interlaced",
        ".heic": "ISO Media, HEIF Image HEVC Main or Main Still Picture Profile",
        ".mp4": "ISO Media, MP4 v2 [ISO 14496-14]",
        ".mov": "ISO Media, Apple QuickTime movie, Apple QuickTime (.MOV/QT)",
        ".gif": "GIF image data, version 89a, 10 x 10",
    }

    def __init__(self, overrides=None):
        self.overrides = {Path(k): v for k, v in (overrides or {}).items()}
        self.calls = []

    def describe(self, path):
        self.calls.append(path)
        if path in self.overrides:
            return self.overrides[path]
        return self.DESCRIPTIONS.get(path.suffix.lower(), "data")


@pytest.fixture
def fake_sniffer():
    return FakeSniffer()


def write_sidecar(path: Path, creation: int = 1562245812, modified: int = 1562250000, **extra) -> Path:
    """Write a Takeout-style JSON sidecar."""
    data = {
        "title": path.name,
        "creationTime": {"timestamp": str(creation), "formatted": ""},
        "photoLastModifiedTime": {"timestamp": str(modified), "formatted": ""},
        "photoTakenTime": {"timestamp": str(creation), "formatted": ""},
    }
    data.update(extra)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def make_file():
    """Create a file with the given bytes, creating parent directories."""
    def _make(path: Path, content: bytes = b"media") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _make


@pytest.fixture
def make_sidecar():
    return write_sidecar


@pytest.fixture
def make_sniffer():
    """Factory for FakeSniffer with per-path description overrides."""
    return FakeSniffer
