"""
Utility functions for reading the input image sent with a generation request.
"""
import io
import base64
import logging
from typing import Optional

try:
    from PIL import Image, UnidentifiedImageError
except ImportError:
    logging.error("Pillow (PIL) is required. Install with: pip install pillow")
    raise

from .exceptions import ValidationError

logger = logging.getLogger(__name__)


def load_input_image(path: str) -> bytes:
    """
    Read an image file and make sure it decodes as an image.

    The raw file bytes are returned unchanged so the service receives exactly
    what is on disk.

    Args:
        path: Path to the image file

    Returns:
        bytes: The file contents

    Raises:
        ValidationError: If the file is missing, unreadable, or not an image
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except FileNotFoundError:
        raise ValidationError(f"input image not found: {path}")
    except OSError as e:
        raise ValidationError(f"cannot read input image {path}: {e}")

    if not data:
        raise ValidationError(f"input image is empty: {path}")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            logger.info(f"Loaded input image: {path} ({img.format}, {img.size[0]}x{img.size[1]})")
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValidationError(f"input image {path} is not a readable image: {e}")

    return data


def encode_image_base64(data: Optional[bytes]) -> str:
    """Encode image bytes for the ``input_image_base64`` field ('' when absent)."""
    if not data:
        return ""
    return base64.b64encode(data).decode("ascii")
