"""
Repeat a table row once per entry of a named dataset.

A row containing ``${table:orders}`` is the marker row; the row right
after it is the template row. For each entry in ``table_bindings["orders"]``
a copy of the template row is materialised with that entry's values, the
template row is removed and the marker text is cleared. Only the first
marker row of a table is acted upon.
"""
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.table import Table, _Cell

from logger import logger
from utils.docx_utils import substitute_paragraph, substitute_text
from utils.placeholder_scanner import (
    PlaceholderSyntax,
    TableMarker,
    find_table_marker,
    strip_table_markers,
)
from utils.run_text import append_text_run, merge_cell_text, merge_text, rewrite


@dataclass
class ExpansionResult:
    table_name: str
    rows_inserted: int = 0
    template_removed: bool = False


def _row_cells(tr, table: Table) -> List[_Cell]:
    # Physical cells only; Table.rows[i].cells repeats horizontally merged ones.
    return [_Cell(tc, table) for tc in tr.tc_lst]


def _find_marker(cells: Sequence[_Cell]) -> Optional[TableMarker]:
    for cell in cells:
        marker = find_table_marker(merge_cell_text(cell))
        if marker is not None:
            return marker
    return None


def _substitute_cells(cells: Sequence[_Cell], scalar_bindings, syntax) -> None:
    for cell in cells:
        for paragraph in cell.paragraphs:
            substitute_paragraph(paragraph, scalar_bindings, syntax=syntax)


def clear_marker_row(cells: Sequence[_Cell]) -> None:
    """Remove ``${table:...}`` text from the row, keeping everything else."""
    for cell in cells:
        for paragraph in cell.paragraphs:
            merged = merge_text(paragraph)
            cleaned = strip_table_markers(merged)
            if cleaned != merged:
                rewrite(paragraph, cleaned)


def _build_row(template_tr, table: Table, texts: Sequence[str]):
    """New ``w:tr`` shaped like the template row with one run per cell."""
    tr = OxmlElement("w:tr")
    if template_tr.trPr is not None:
        tr.append(deepcopy(template_tr.trPr))

    for template_tc, text in zip(template_tr.tc_lst, texts):
        tc = OxmlElement("w:tc")
        if template_tc.tcPr is not None:
            tc.append(deepcopy(template_tc.tcPr))
        p = OxmlElement("w:p")
        template_ppr = template_tc.p_lst[0].pPr if template_tc.p_lst else None
        if template_ppr is not None:
            p.append(deepcopy(template_ppr))
        tc.append(p)
        tr.append(tc)
        append_text_run(_Cell(tc, table).paragraphs[0], text)
    return tr


def _replace_template_row(table: Table, template_tr, new_rows) -> None:
    """Put ``new_rows`` where the template row was; other table children stay put."""
    tbl = table._tbl
    anchor = tbl.index(template_tr)
    tbl.remove(template_tr)
    for offset, tr in enumerate(new_rows):
        tbl.insert(anchor + offset, tr)


def _materialise_rows(
    template_tr,
    table: Table,
    dataset: Sequence[Mapping[str, Any]],
    scalar_bindings: Mapping[str, Any],
    syntax: PlaceholderSyntax,
):
    template_texts = [merge_cell_text(cell) for cell in _row_cells(template_tr, table)]
    rows = []
    for row_bindings in dataset:
        texts = []
        for text in template_texts:
            # Row values first: a key bound per row shadows the global one.
            text = substitute_text(text, row_bindings or {}, syntax)
            text = substitute_text(text, scalar_bindings, syntax)
            texts.append(text)
        rows.append(_build_row(template_tr, table, texts))
    return rows


def expand_table(
    table: Table,
    scalar_bindings: Optional[Mapping[str, Any]] = None,
    table_bindings: Optional[Mapping[str, Sequence[Mapping[str, Any]]]] = None,
    syntax: PlaceholderSyntax = PlaceholderSyntax.DOLLAR,
) -> Optional[ExpansionResult]:
    """
    Fill one table in place.

    Every row other than the template row gets plain scalar substitution.
    Returns None when the table has no marker row.
    """
    scalar_bindings = scalar_bindings or {}
    table_bindings = table_bindings or {}

    rows = list(table._tbl.tr_lst)
    marker = None
    marker_index = None
    for index, tr in enumerate(rows):
        cells = _row_cells(tr, table)
        marker = _find_marker(cells)
        _substitute_cells(cells, scalar_bindings, syntax)
        if marker is not None:
            marker_index = index
            break

    if marker is None:
        return None

    result = ExpansionResult(table_name=marker.name)
    marker_cells = _row_cells(rows[marker_index], table)
    template_index = marker_index + 1

    if template_index >= len(rows):
        logger.info(f"[TABLE_LOOP] Marker '{marker.name}' is in the last row; no template row to repeat")
        clear_marker_row(marker_cells)
        return result

    trailing = rows[template_index + 1:]
    dataset = table_bindings.get(marker.name)
    if not dataset:
        logger.info(f"[TABLE_LOOP] No data for '{marker.name}'; template row kept as-is")
        clear_marker_row(marker_cells)
    else:
        template_tr = rows[template_index]
        new_rows = _materialise_rows(template_tr, table, dataset, scalar_bindings, syntax)
        _replace_template_row(table, template_tr, new_rows)
        clear_marker_row(marker_cells)
        result.rows_inserted = len(new_rows)
        result.template_removed = True
        logger.info(f"[TABLE_LOOP] Expanded '{marker.name}' into {len(new_rows)} rows")

    for tr in trailing:
        _substitute_cells(_row_cells(tr, table), scalar_bindings, syntax)
    return result
