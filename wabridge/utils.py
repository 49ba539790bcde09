"""
Utility functions for the bridge: timestamps and QR rendering.
"""

import io
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

import qrcode
from PIL import Image

logger = logging.getLogger(__name__)


def format_rfc3339(value: datetime) -> str:
    """
    Format a datetime as RFC3339 in UTC with a Z suffix.
    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _build_qr(code: str) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(code)
    qr.make(fit=True)
    return qr


def render_qr_png(code: str, size: int = 256) -> bytes:
    """
    Render a login code as a square PNG of exactly `size` x `size` pixels.

    Args:
        code: Login code text to encode
        size: Side length in pixels

    Returns:
        PNG bytes
    """
    logger.debug(f"Rendering QR image: {len(code)} chars, {size}px")
    img = _build_qr(code).make_image(fill_color="black", back_color="white").convert("RGB")
    # Module edges must stay hard, no smoothing
    img = img.resize((size, size), Image.NEAREST)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def print_qr_terminal(code: str, out: Optional[TextIO] = None) -> None:
    """Print a login code as a QR block to a terminal stream (stdout by default)."""
    _build_qr(code).print_ascii(out=out or sys.stdout, invert=True)
