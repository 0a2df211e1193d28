import base64
import subprocess
from unittest.mock import patch

import pytest

from core.error_handling import ConversionError
from services.pdf_service import convert_to_pdf, word_to_pdf_base64


def _fake_soffice(pdf_bytes=b"%PDF-1.4 fake", returncode=0):
    """subprocess.run stand-in that writes the PDF where soffice would."""
    def run(cmd, **kwargs):
        outdir = cmd[cmd.index("--outdir") + 1]
        source = cmd[-1]
        if returncode == 0:
            from pathlib import Path
            Path(outdir, Path(source).stem + ".pdf").write_bytes(pdf_bytes)
        return subprocess.CompletedProcess(cmd, returncode, stdout=b"convert ok\n")
    return run


def test_convert_to_pdf_builds_command(tmp_path):
    source = tmp_path / "contract.docx"
    source.write_bytes(b"docx")

    with patch("services.pdf_service.subprocess.run", side_effect=_fake_soffice()) as run:
        pdf = convert_to_pdf(source, soffice_path="/opt/soffice", timeout=5)

    cmd = run.call_args.args[0]
    assert cmd[:4] == ["/opt/soffice", "--headless", "--convert-to", "pdf"]
    assert cmd[-1] == str(source)
    assert run.call_args.kwargs["stderr"] == subprocess.STDOUT
    assert pdf == tmp_path / "contract.pdf"


def test_convert_to_pdf_nonzero_exit(tmp_path):
    source = tmp_path / "contract.docx"
    source.write_bytes(b"docx")

    with patch("services.pdf_service.subprocess.run", side_effect=_fake_soffice(returncode=77)):
        with pytest.raises(ConversionError, match="77"):
            convert_to_pdf(source, soffice_path="soffice", timeout=5)


def test_convert_to_pdf_missing_executable(tmp_path):
    source = tmp_path / "contract.docx"
    source.write_bytes(b"docx")

    with patch("services.pdf_service.subprocess.run", side_effect=FileNotFoundError("soffice")):
        with pytest.raises(ConversionError):
            convert_to_pdf(source, soffice_path="soffice", timeout=5)


def test_word_to_pdf_base64_cleans_up(tmp_path):
    docx_b64 = base64.b64encode(b"fake docx").decode("ascii")

    with patch("services.pdf_service.subprocess.run", side_effect=_fake_soffice(b"%PDF-data")):
        response = word_to_pdf_base64(docx_b64, work_dir=tmp_path, soffice_path="soffice", timeout=5)

    assert response.code == 0
    assert base64.b64decode(response.data) == b"%PDF-data"
    assert list(tmp_path.iterdir()) == []


def test_word_to_pdf_base64_failure_still_cleans_up(tmp_path):
    docx_b64 = base64.b64encode(b"fake docx").decode("ascii")

    with patch("services.pdf_service.subprocess.run", side_effect=_fake_soffice(returncode=1)):
        with pytest.raises(ConversionError):
            word_to_pdf_base64(docx_b64, work_dir=tmp_path, soffice_path="soffice", timeout=5)

    assert list(tmp_path.iterdir()) == []
