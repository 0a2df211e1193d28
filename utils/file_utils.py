import base64
import binascii
import os
import uuid
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import requests

from core.constants import TEMP_NAME_LENGTH
from core.error_handling import InvalidInputError, handle_error
from logger import logger

PathLike = Union[str, os.PathLike]


def decode_base64(data: str) -> bytes:
    """
    Decode a Base64 payload, rejecting blank or malformed input.
    """
    if data is None or not str(data).strip():
        raise InvalidInputError("Template Base64 must not be empty.")
    try:
        return base64.b64decode(str(data).strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        handle_error(e, code="DOCX_INPUT_002", user_message="Invalid Base64 payload.",
                     raise_it=True, error_cls=InvalidInputError)


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def build_temp_path(extension: str, folder: Optional[PathLike] = None) -> Path:
    """
    Random temp file path under ``folder`` or ``TEMP_DIR/tmp``.
    """
    if not folder:
        from config import get_config
        folder = Path(get_config().TEMP_DIR) / "tmp"
    name = uuid.uuid4().hex[:TEMP_NAME_LENGTH] + extension
    return Path(folder) / name


def ensure_parent_dir(path: PathLike) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def write_bytes(path: PathLike, data: bytes) -> Path:
    ensure_parent_dir(path)
    path = Path(path)
    path.write_bytes(data)
    return path


def delete_file(path: Optional[PathLike]) -> None:
    """Delete a temp file if it exists; failures are only logged."""
    if not path:
        return
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"⚠️ Failed to delete temp file {path}: {e}")


def validate_file_size(file_path: PathLike, max_size_mb: int = 10) -> None:
    """
    Validate that a file is not larger than max_size_mb.
    """
    size_mb = os.path.getsize(file_path) / (1024 * 1024)
    if size_mb > max_size_mb:
        raise ValueError(
            f"File size {size_mb:.2f} MB exceeds the limit of {max_size_mb} MB."
        )


def download_image(image_url: str, timeout: Optional[int] = None) -> BytesIO:
    """
    Fetch an http(s) image into memory for use as an image binding.
    """
    if timeout is None:
        from config import get_config
        timeout = get_config().IMAGE_DOWNLOAD_TIMEOUT_SECONDS
    try:
        response = requests.get(image_url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        handle_error(e, code="IMAGE_DOWNLOAD_001",
                     user_message=f"Failed to download image: {image_url}", raise_it=True)
    logger.info(f"[IMAGE_DOWNLOAD] 📥 Downloaded {len(response.content)} bytes from {image_url}")
    return BytesIO(response.content)
