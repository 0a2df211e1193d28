"""
Fill a Word template with scalar values, inline images and repeated table rows.

    fill_docx(template_bytes,
              {"contractNo": "HT-2025-001", "userName": "Zhang San"},
              {"signature": open("sig.png", "rb")},
              {"orderTable": [{"item": "A", "price": "100", "qty": "2"}]})

Top-level paragraphs are processed first, then each top-level table
independently. The whole call runs synchronously on one in-memory document.
"""
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO, Mapping, Optional, Sequence, Union

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from lxml import etree

from core.auth import check_authorized
from core.error_handling import (
    InvalidInputError,
    LicenseError,
    MalformedTemplateError,
    SerializationError,
    handle_error,
    log_info,
)
from logger import logger
from utils.docx_utils import substitute_paragraph
from utils.file_utils import (
    decode_base64,
    encode_base64,
    validate_file_size,
    write_bytes,
)
from utils.placeholder_scanner import PlaceholderSyntax
from utils.table_loop import expand_table

ScalarBindings = Mapping[str, Any]
ImageBindings = Mapping[str, Union[BinaryIO, bytes]]
TableBindings = Mapping[str, Sequence[Mapping[str, Any]]]


def _open_document(template_bytes: bytes):
    try:
        return Document(BytesIO(template_bytes))
    except (zipfile.BadZipFile, PackageNotFoundError, KeyError, ValueError, etree.XMLSyntaxError) as e:
        handle_error(
            e,
            code="DOCX_PARSE_001",
            user_message="Template is not a readable Word document.",
            raise_it=True,
            error_cls=MalformedTemplateError,
        )


def _save_document(document) -> bytes:
    buffer = BytesIO()
    try:
        document.save(buffer)
    except Exception as e:
        handle_error(
            e,
            code="DOCX_SAVE_001",
            user_message="Failed to write the filled document.",
            raise_it=True,
            error_cls=SerializationError,
        )
    return buffer.getvalue()


def fill_docx(
    template_bytes: bytes,
    scalar_bindings: Optional[ScalarBindings] = None,
    image_bindings: Optional[ImageBindings] = None,
    table_bindings: Optional[TableBindings] = None,
    *,
    syntax: PlaceholderSyntax = PlaceholderSyntax.DOLLAR,
    require_license: bool = False,
) -> bytes:
    """
    Return the filled document as ``.docx`` bytes.

    Missing scalar keys and missing or empty datasets are not errors.
    Caller-supplied image streams are read fully but never closed.
    """
    if not template_bytes:
        raise InvalidInputError("Template bytes must not be empty.")
    if require_license and not check_authorized():
        raise LicenseError("Authorization expired or license key invalid.")

    scalar_bindings = scalar_bindings or {}
    image_bindings = image_bindings or {}
    table_bindings = table_bindings or {}

    document = _open_document(template_bytes)
    consumed_images = set()

    paragraphs = document.paragraphs
    for paragraph in paragraphs:
        substitute_paragraph(paragraph, scalar_bindings, image_bindings, syntax, consumed_images)

    expansions = []
    for table in document.tables:
        result = expand_table(table, scalar_bindings, table_bindings, syntax)
        if result is not None:
            expansions.append(result)

    output = _save_document(document)
    log_info(
        "Filled Word template",
        code="DOCX_FILL",
        context={
            "paragraphs": len(paragraphs),
            "tables": len(document.tables),
            "images": len(consumed_images),
            "loops": [f"{r.table_name}:{r.rows_inserted}" for r in expansions],
        },
    )
    return output


def fill_docx_base64(
    template_base64: str,
    scalar_bindings: Optional[ScalarBindings] = None,
    image_bindings: Optional[ImageBindings] = None,
    table_bindings: Optional[TableBindings] = None,
    **kwargs,
) -> str:
    """Base64 in, Base64 out wrapper around :func:`fill_docx`."""
    template_bytes = decode_base64(template_base64)
    return encode_base64(fill_docx(template_bytes, scalar_bindings, image_bindings, table_bindings, **kwargs))


def fill_docx_file(
    template_path: Union[str, Path],
    output_path: Union[str, Path],
    scalar_bindings: Optional[ScalarBindings] = None,
    image_bindings: Optional[ImageBindings] = None,
    table_bindings: Optional[TableBindings] = None,
    max_size_mb: Optional[int] = None,
    **kwargs,
) -> Path:
    """Fill a template on disk and write the result to ``output_path``."""
    template_path = Path(template_path)
    if not template_path.is_file():
        raise InvalidInputError(f"Template file does not exist: {template_path}")

    if max_size_mb is None:
        from config import get_config
        max_size_mb = get_config().MAX_TEMPLATE_MB
    validate_file_size(template_path, max_size_mb)

    output = fill_docx(template_path.read_bytes(), scalar_bindings, image_bindings, table_bindings, **kwargs)
    saved = write_bytes(output_path, output)
    logger.info(f"[DOCX_FILL] ✅ Wrote filled document to {saved}")
    return saved
