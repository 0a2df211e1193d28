import re
from io import BytesIO
from typing import Any, Mapping, Optional, Set

from docx.image.exceptions import (
    InvalidImageStreamError,
    UnexpectedEndOfFileError,
    UnrecognizedImageError,
)
from docx.shared import Pt
from docx.text.paragraph import Paragraph

from core.constants import IMAGE_DISPLAY_SIZE_PT, MUSTACHE_PLACEHOLDER_PATTERN
from core.error_handling import ImageDecodeError, handle_error
from logger import logger
from utils.placeholder_scanner import PlaceholderSyntax, first_image_placeholder, token_for
from utils.run_text import append_text_run, clear_runs, merge_text, place_run, rewrite


def stringify(value: Any) -> str:
    return "" if value is None else str(value)


def substitute_text(
    text: str,
    bindings: Mapping[str, Any],
    syntax: PlaceholderSyntax = PlaceholderSyntax.DOLLAR,
) -> str:
    """
    Replace every placeholder whose key is bound. Unbound placeholders are
    left in place so later passes (images, table rows) can still see them.
    """
    if not text or not bindings:
        return text

    if syntax is PlaceholderSyntax.MUSTACHE:
        values = {str(k).strip(): v for k, v in bindings.items()}

        def _replace(match: re.Match) -> str:
            key = match.group(1).strip()
            if key in values:
                return stringify(values[key])
            return match.group(0)

        return MUSTACHE_PLACEHOLDER_PATTERN.sub(_replace, text)

    for key, value in bindings.items():
        token = token_for(str(key), syntax)
        if token in text:
            text = text.replace(token, stringify(value))
    return text


def _read_image(image) -> BytesIO:
    """Read a caller's image fully into memory without closing it."""
    if isinstance(image, (bytes, bytearray)):
        return BytesIO(bytes(image))
    return BytesIO(image.read())


def insert_image_run(paragraph: Paragraph, image, key: str, position: Optional[int] = None):
    """Add a run embedding ``image`` at the fixed display size, at ``position``."""
    stream = _read_image(image)
    run = paragraph.add_run()
    size = Pt(IMAGE_DISPLAY_SIZE_PT)
    try:
        run.add_picture(stream, width=size, height=size)
    except (UnrecognizedImageError, UnexpectedEndOfFileError, InvalidImageStreamError) as e:
        handle_error(
            e,
            code="DOCX_IMAGE_001",
            user_message=f"Image bound to '{key}' could not be decoded.",
            raise_it=True,
            error_cls=ImageDecodeError,
        )
    return place_run(paragraph, run, position)


def substitute_paragraph(
    paragraph: Paragraph,
    scalar_bindings: Mapping[str, Any],
    image_bindings: Optional[Mapping[str, Any]] = None,
    syntax: PlaceholderSyntax = PlaceholderSyntax.DOLLAR,
    consumed_images: Optional[Set[str]] = None,
) -> bool:
    """
    Substitute scalars, then splice in at most one image, in place.

    Images are matched against the text left after scalar substitution.
    Keys already in ``consumed_images`` are skipped so each bound image is
    used once per document. Returns True when an image was inserted.
    """
    if not paragraph.runs and not paragraph.hyperlinks:
        return False

    merged = merge_text(paragraph)
    replaced = substitute_text(merged, scalar_bindings, syntax)

    image_bindings = image_bindings or {}
    consumed = consumed_images if consumed_images is not None else set()
    available = [k for k, v in image_bindings.items() if v is not None and k not in consumed]
    placeholder = first_image_placeholder(replaced, available, syntax)

    if placeholder is None:
        if replaced != merged:
            rewrite(paragraph, replaced)
        return False

    before = replaced[:placeholder.start]
    after = replaced[placeholder.end:]

    position = clear_runs(paragraph)
    append_text_run(paragraph, before, position)
    if position is not None:
        position += 1
    insert_image_run(paragraph, image_bindings[placeholder.key], placeholder.key, position)
    if after:
        if position is not None:
            position += 1
        append_text_run(paragraph, after, position)

    consumed.add(placeholder.key)
    logger.debug(f"[DOCX_IMAGE] Inserted image for placeholder {placeholder.raw}")
    return True
