import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from core.constants import DOCX_EXTENSION, PDF_EXTENSION, RESPONSE_OK
from core.error_handling import ConversionError, handle_error
from logger import logger
from utils.file_utils import (
    build_temp_path,
    decode_base64,
    delete_file,
    encode_base64,
    ensure_parent_dir,
    write_bytes,
)


@dataclass
class ServiceResponse:
    code: int
    msg: str
    data: Optional[str] = None


def convert_to_pdf(
    input_path: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    *,
    soffice_path: Optional[str] = None,
    timeout: Optional[int] = None,
    convert_filter: str = "pdf",
) -> Path:
    """
    Convert an office or HTML file to PDF with headless LibreOffice.
    Returns the path of the produced PDF.
    """
    input_path = Path(input_path)
    output_dir = Path(output_dir) if output_dir else input_path.parent
    if soffice_path is None or timeout is None:
        from config import get_config
        config = get_config()
        soffice_path = soffice_path or config.SOFFICE_PATH
        timeout = timeout or config.CONVERT_TIMEOUT_SECONDS

    output_dir.mkdir(parents=True, exist_ok=True)
    cmd = [
        soffice_path,
        "--headless",
        "--convert-to", convert_filter,
        "--outdir", str(output_dir.resolve()),
        str(input_path),
    ]
    logger.info(f"[PDF_CONVERT] Executing: {' '.join(cmd)}")

    try:
        proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        handle_error(e, code="PDF_CONVERT_001", user_message="LibreOffice could not be run.",
                     raise_it=True, error_cls=ConversionError)

    for line in (proc.stdout or b"").decode("utf-8", errors="replace").splitlines():
        logger.info(f"[PDF_CONVERT] {line}")

    if proc.returncode != 0:
        raise ConversionError(f"LibreOffice conversion failed with exit code {proc.returncode}")

    pdf_path = output_dir / (input_path.stem + PDF_EXTENSION)
    if not pdf_path.exists():
        raise ConversionError(f"PDF not produced by LibreOffice: {pdf_path}")
    return pdf_path


def convert_to_pdf_file(input_path: Union[str, Path], target_path: Union[str, Path], **kwargs) -> Path:
    """Convert and move the resulting PDF to ``target_path``."""
    target_path = Path(target_path)
    ensure_parent_dir(target_path)
    pdf_path = convert_to_pdf(input_path, target_path.parent, **kwargs)
    if pdf_path.resolve() != target_path.resolve():
        shutil.move(str(pdf_path), str(target_path))
    return target_path


def word_to_pdf_base64(docx_base64: str, work_dir: Optional[Union[str, Path]] = None, **kwargs) -> ServiceResponse:
    """
    Base64 Word document in, Base64 PDF out. Temp files are always removed.
    """
    word_path = build_temp_path(DOCX_EXTENSION, folder=work_dir)
    pdf_path = word_path.with_suffix(PDF_EXTENSION)
    try:
        write_bytes(word_path, decode_base64(docx_base64))
        pdf_path = convert_to_pdf(word_path, word_path.parent, **kwargs)
        pdf_base64 = encode_base64(pdf_path.read_bytes())
    finally:
        delete_file(word_path)
        delete_file(pdf_path)

    logger.info(f"[PDF_CONVERT] ✅ Converted {word_path.name} to PDF")
    return ServiceResponse(code=RESPONSE_OK, msg="Conversion succeeded", data=pdf_base64)
