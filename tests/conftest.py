"""Shared fixtures producing real media files for the test suite."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

# ISO-BMFF "ftyp" box (major brand mp42, compatible mp42/isom) followed by an empty "mdat" box.
MP4_BYTES = (
    b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"
    + b"\x00\x00\x00\x10mdat"
    + b"\x00" * 8
)
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n%%EOF\n"


def _save_image(path: Path, image_format: str, color: str = "red") -> Path:
    Image.new("RGB", (32, 16), color=color).save(path, format=image_format)
    return path


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    return _save_image(tmp_path / "picture.png", "PNG")


@pytest.fixture
def jpeg_file(tmp_path: Path) -> Path:
    return _save_image(tmp_path / "photo.jpg", "JPEG", color="blue")


@pytest.fixture
def tiff_file(tmp_path: Path) -> Path:
    return _save_image(tmp_path / "scan.tif", "TIFF", color="green")


@pytest.fixture
def mp4_file(tmp_path: Path) -> Path:
    path = tmp_path / "clip.mp4"
    path.write_bytes(MP4_BYTES)
    return path


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "document.pdf"
    path.write_bytes(PDF_BYTES)
    return path


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_text("first line\nsecond line\n", encoding="utf-8")
    return path
