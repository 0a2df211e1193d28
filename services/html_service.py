import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

import lxml.html
from lxml import etree

from core.auth import LicenseValidator, check_authorized
from core.constants import HTML_EXTENSION, HTML_FONT_FAMILY
from core.error_handling import LicenseError, handle_error
from logger import logger
from services.pdf_service import convert_to_pdf_file
from utils.file_utils import delete_file
from utils.template_engine import render_html_placeholders


@dataclass(frozen=True)
class FontSet:
    regular: Path
    bold: Path


HtmlRenderer = Callable[[str, Path, FontSet], None]


def embed_fonts(html: str, fonts: FontSet) -> str:
    """Add @font-face rules for the regular and bold faces to <head>."""
    document = lxml.html.document_fromstring(html)
    head = document.find("head")
    if head is None:
        head = etree.Element("head")
        document.insert(0, head)

    style = etree.SubElement(head, "style")
    style.text = (
        f'@font-face {{ font-family: "{HTML_FONT_FAMILY}"; font-weight: 400; '
        f'src: url("{fonts.regular.resolve().as_uri()}"); }}\n'
        f'@font-face {{ font-family: "{HTML_FONT_FAMILY}"; font-weight: 700; '
        f'src: url("{fonts.bold.resolve().as_uri()}"); }}\n'
        f'body {{ font-family: "{HTML_FONT_FAMILY}", serif; }}'
    )
    return lxml.html.tostring(document, doctype="<!DOCTYPE html>", encoding="unicode")


def libreoffice_html_renderer(html: str, target_path: Path, fonts: FontSet) -> None:
    """Write the HTML beside the target and let LibreOffice print it to PDF."""
    html_path = target_path.with_suffix(HTML_EXTENSION)
    try:
        html_path.write_text(embed_fonts(html, fonts), encoding="utf-8")
        convert_to_pdf_file(html_path, target_path, convert_filter="pdf:writer_web_pdf_Export")
    finally:
        delete_file(html_path)


def render_html_to_pdf(
    template_path: Union[str, Path],
    values: Optional[Mapping[str, Any]],
    target_path: Union[str, Path],
    renderer: Optional[HtmlRenderer] = None,
    validator: Optional[LicenseValidator] = None,
) -> bool:
    """
    Fill an HTML template and render it to a PDF file.

    Returns False instead of raising: callers of this façade only need to
    know whether a PDF was produced. Details go to the log.
    """
    try:
        if not check_authorized(validator=validator):
            raise LicenseError("Authorization expired or license key invalid.")

        template_path = Path(template_path) if template_path else None
        if template_path is None or not template_path.is_file():
            raise FileNotFoundError(f"HTML template does not exist: {template_path}")

        html = template_path.read_text(encoding="utf-8")

        if values is None:
            logger.warning("[HTML_RENDER] No values supplied; nothing rendered")
            return False
        html = render_html_placeholders(html, values)

        from config import get_config
        config = get_config()
        fonts = FontSet(regular=Path(config.FONT_REGULAR_PATH), bold=Path(config.FONT_BOLD_PATH))
        for font in (fonts.regular, fonts.bold):
            if not font.is_file():
                raise FileNotFoundError(f"Font file not found: {font}")

        target_path = Path(target_path)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        if target_path.exists():
            target_path.unlink()
        if os.name != "nt":
            target_path.touch(mode=0o755)

        (renderer or libreoffice_html_renderer)(html, target_path, fonts)
        logger.info(f"[HTML_RENDER] ✅ Rendered {template_path.name} to {target_path}")
        return True

    except Exception as e:
        handle_error(e, code="HTML_RENDER_001", user_message="Failed to render HTML template to PDF.")
        return False
