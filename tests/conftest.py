"""Pytest configuration and shared fixtures for the signature tests."""

import io
import json
import subprocess
import sys
from pathlib import Path

import pytest
from PIL import Image, ImageDraw
from reportlab.pdfgen import canvas

# Add scripts to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "scripts"))

SCRIPTS = PROJECT_ROOT / "scripts"

from pixel_buffer import PixelBuffer  # noqa: E402

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
LETTER = (612, 792)


@pytest.fixture
def tmp_output(tmp_path):
    return tmp_path


# --- Helpers used across test files ---

def solid_buffer(width, height, rgba):
    return PixelBuffer(width, height, bytes(rgba) * (width * height))


def paint(buffer, points, rgba):
    """Return a copy of `buffer` with the given (x, y) pixels set to rgba."""
    arr = buffer.to_array()
    for x, y in points:
        arr[y, x] = rgba
    return PixelBuffer.from_array(arr)


def square(x0, y0, size):
    return [(x, y) for y in range(y0, y0 + size) for x in range(x0, x0 + size)]


def png_bytes(img, fmt="PNG"):
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def signature_photo(width=240, height=120, paper=(236, 232, 220), ink=(30, 40, 120), fmt="PNG"):
    """A synthetic 'photo' of a pen signature on off-white paper."""
    img = Image.new("RGB", (width, height), paper)
    draw = ImageDraw.Draw(img)
    draw.line([(40, 80), (80, 30), (120, 85), (160, 35), (200, 70)], fill=ink, width=5)
    return png_bytes(img, fmt)


def make_pdf(num_pages=2, pagesize=LETTER):
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=pagesize)
    for i in range(num_pages):
        c.drawString(72, pagesize[1] - 72, f"Page {i + 1}")
        c.showPage()
    c.save()
    return buf.getvalue()


def run_script(name, args, expect_ok=True):
    """Run one of the CLI scripts; returns (parsed stdout or stderr JSON, returncode)."""
    cmd = [sys.executable, str(SCRIPTS / name), *[str(a) for a in args]]
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    if expect_ok:
        assert result.returncode == 0, f"{name} failed:\n{result.stderr}"
        return json.loads(result.stdout), result.returncode
    # Errors are one JSON line on stderr, after any log lines.
    last = result.stderr.strip().splitlines()[-1]
    return json.loads(last), result.returncode


@pytest.fixture
def pdf_path(tmp_path):
    path = tmp_path / "contract.pdf"
    path.write_bytes(make_pdf(num_pages=3))
    return path


@pytest.fixture
def photo_path(tmp_path):
    path = tmp_path / "signature.png"
    path.write_bytes(signature_photo())
    return path
