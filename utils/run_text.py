"""
Merge fragmented run text into one logical string and write it back.

Word splits a sentence across runs wherever formatting, spell-check,
revision marks or hyperlinks change, so a placeholder like ``${name}`` can
end up as ``"${na"`` + ``"me}"``. Callers always work on the merged string
and only re-fragment on write. Styling applied to the replaced text is lost
on rewrite.
"""
from typing import Iterator, Optional

from docx.oxml.ns import qn
from docx.table import _Cell
from docx.text.hyperlink import Hyperlink
from docx.text.paragraph import Paragraph
from docx.text.run import Run

# Run children that carry text. Drawings, fields and page/column breaks stay put.
_TEXT_TAGS = {qn("w:t"), qn("w:tab"), qn("w:cr"), qn("w:noBreakHyphen"), qn("w:ptab")}
_BR_TAG = qn("w:br")
_RPR_TAG = qn("w:rPr")


def iter_text_runs(paragraph: Paragraph) -> Iterator[Run]:
    """Runs in document order, including those nested in hyperlinks."""
    for item in paragraph.iter_inner_content():
        if isinstance(item, Hyperlink):
            yield from item.runs
        else:
            yield item


def merge_text(paragraph: Paragraph) -> str:
    """Concatenate every run's text in order with no separator."""
    return "".join(run.text for run in iter_text_runs(paragraph))


def merge_cell_text(cell: _Cell) -> str:
    """Cell text is its paragraphs' merged text joined by newlines."""
    return "\n".join(merge_text(p) for p in cell.paragraphs)


def _is_text_break(element) -> bool:
    break_type = element.get(qn("w:type"))
    return break_type in (None, "textWrapping")


def _strip_text(r) -> None:
    for child in list(r):
        if child.tag in _TEXT_TAGS or (child.tag == _BR_TAG and _is_text_break(child)):
            r.remove(child)
    if all(child.tag == _RPR_TAG for child in r):
        r.getparent().remove(r)


def clear_runs(paragraph: Paragraph) -> Optional[int]:
    """
    Blank the text of every existing run, hyperlinks included.

    Runs left holding nothing but run properties are dropped, as are
    hyperlinks left with no runs; runs that still carry a drawing or a page
    break are kept in place. Returns the child index the first run (or
    hyperlink) occupied, or None when the paragraph had no runs.
    """
    p = paragraph._p
    anchor = None
    for item in list(paragraph.iter_inner_content()):
        if isinstance(item, Hyperlink):
            container = item._hyperlink
            if anchor is None:
                anchor = p.index(container)
            for run in item.runs:
                _strip_text(run._r)
            if not container.r_lst:
                p.remove(container)
        else:
            if anchor is None:
                anchor = p.index(item._r)
            _strip_text(item._r)
    return anchor


def place_run(paragraph: Paragraph, run: Run, position: Optional[int]) -> Run:
    """Move a freshly added run to ``position``; None leaves it at the end."""
    if position is not None:
        paragraph._p.insert(position, run._r)
    return run


def append_text_run(paragraph: Paragraph, text: str, position: Optional[int] = None) -> Run:
    """
    Add one run holding ``text`` at ``position``; newlines become line
    breaks and tabs become tab stops inside that same run.
    """
    run = paragraph.add_run()
    run.text = (text or "").replace("\r\n", "\n")
    return place_run(paragraph, run, position)


def rewrite(paragraph: Paragraph, new_text: str) -> None:
    """Replace the paragraph's text with ``new_text`` as a single run."""
    if not paragraph.runs and not paragraph.hyperlinks and not new_text:
        return
    position = clear_runs(paragraph)
    append_text_run(paragraph, new_text, position)
