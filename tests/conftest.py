import pytest
from docx import Document

from docx_factory import add_table, png, to_bytes


@pytest.fixture
def png_bytes():
    return png()


@pytest.fixture
def order_table_docx():
    """Marker row, template row, and a trailing total row."""
    document = Document()
    document.add_paragraph("Contract ${contractNo}")
    add_table(document, [
        ["${table:orders}Item", "Price", "Qty"],
        ["${item}", "${price}", "${qty}"],
        ["Total", "${total}", ""],
    ])
    return to_bytes(document)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.delenv("AZURE_KEYVAULT_URL", raising=False)
    monkeypatch.delenv("ENV", raising=False)
    monkeypatch.delenv("LICENSE_KEY", raising=False)
    monkeypatch.setenv("TEMP_DIR", str(tmp_path / "temp"))
