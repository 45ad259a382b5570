"""Payment screenshot uploads.

Customers prove a mobile-wallet or bank payment by attaching a screenshot.
The upload is validated up front but only written to disk once the booking
has been admitted, so a rejected booking leaves no file behind.
"""

import io
import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.core.config import settings
from app.services.booking_rules import InvalidBookingField

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}
PAYMENTS_SUBDIR = "payments"


def payments_dir() -> Path:
    return Path(settings.upload_dir) / PAYMENTS_SUBDIR


@dataclass
class PaymentScreenshot:
    data: bytes
    suffix: str

    def save(self) -> str:
        """Write the image under the payments directory and return its file name."""
        directory = payments_dir()
        directory.mkdir(parents=True, exist_ok=True)
        filename = f"payment-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{self.suffix}"
        (directory / filename).write_bytes(self.data)
        return filename


def discard(filename: str) -> None:
    """Remove a stored screenshot (used when the booking insert fails after saving)."""
    path = payments_dir() / filename
    path.unlink(missing_ok=True)
    logger.info("Discarded payment screenshot %s", filename)


def _invalid(message: str) -> InvalidBookingField:
    return InvalidBookingField("payment_screenshot", message)


async def read_payment_screenshot(upload: UploadFile | None) -> PaymentScreenshot | None:
    """Validate an uploaded screenshot. Returns None when no file was sent."""
    if upload is None or not upload.filename:
        return None

    suffix = Path(upload.filename).suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS or (upload.content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        raise _invalid("Only image files are allowed")

    data = await upload.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise _invalid(f"Screenshot must be at most {settings.max_upload_bytes // (1024 * 1024)} MB")

    try:
        Image.open(io.BytesIO(data)).verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        raise _invalid("Invalid image file") from None

    return PaymentScreenshot(data=data, suffix=".jpg" if suffix == ".jpeg" else suffix)
