"""
Template Asset Resolver
=======================

Resolves template image references and encodes them for the remote
locator (base64 PNG, the ``-image`` selector format).
"""

import base64
import io
from pathlib import Path
from typing import Tuple, Union

from PIL import Image

from visual_click.utils.logger import get_logger

logger = get_logger(__name__)


class TemplateError(Exception):
    """A template file is missing or is not a readable image."""

    pass


def resolve_asset_path(reference: Union[str, Path], root: Path) -> Path:
    """
    Resolve an image reference.

    Args:
        reference: Absolute path, or a path relative to ``root``.
        root: Project root.

    Returns:
        Absolute-or-rooted path (existence is not checked).
    """
    path = Path(reference)
    return path if path.is_absolute() else root / path


def get_image_dimensions(data: bytes) -> Tuple[int, int]:
    """
    Validate image bytes and return their dimensions.

    Raises:
        TemplateError: If Pillow cannot identify or verify the image.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            size = image.size
            image.verify()
    except Exception as e:
        raise TemplateError(f"Not a readable image: {e}") from e
    return size


def encode_template(path: Path) -> str:
    """
    Read a template image and return it base64-encoded.

    Args:
        path: Template PNG path.

    Returns:
        Base64 string of the raw file bytes.

    Raises:
        TemplateError: If the file is missing or not an image.
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise TemplateError(f"Cannot read template {path}: {e}") from e

    width, height = get_image_dimensions(data)
    logger.debug("Template loaded", path=str(path), width=width, height=height)

    return base64.b64encode(data).decode("ascii")
