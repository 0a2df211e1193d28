from docx import Document
from docx.oxml import OxmlElement
from docx.oxml.ns import qn

from docx_factory import add_table, table_texts
from utils.table_loop import expand_table

ORDERS = [
    {"item": "Product A", "price": "100", "qty": "2"},
    {"item": "Product B", "price": "200", "qty": "1"},
    {"item": "Product C", "price": "300", "qty": "5"},
]


def _order_table():
    return add_table(Document(), [
        ["${table:orders}Item", "Price", "Qty"],
        ["${item}", "${price}", "${qty}"],
        ["Total", "${total}", ""],
    ])


def test_expands_one_row_per_dataset_entry():
    table = _order_table()
    result = expand_table(table, {"total": "600"}, {"orders": ORDERS})

    assert table_texts(table) == [
        ["Item", "Price", "Qty"],
        ["Product A", "100", "2"],
        ["Product B", "200", "1"],
        ["Product C", "300", "5"],
        ["Total", "600", ""],
    ]
    assert result.table_name == "orders"
    assert result.rows_inserted == 3
    assert result.template_removed is True


def test_row_count_is_original_minus_one_plus_n():
    table = _order_table()
    expand_table(table, {}, {"orders": ORDERS[:2]})
    assert len(table.rows) == 3 - 1 + 2


def test_row_bindings_shadow_global_bindings():
    table = add_table(Document(), [
        ["${table:lines}"],
        ["${name} / ${currency}"],
    ])
    expand_table(
        table,
        {"name": "GLOBAL", "currency": "CNY"},
        {"lines": [{"name": "row-one"}, {"name": "row-two", "currency": "USD"}]},
    )

    assert table_texts(table) == [[""], ["row-one / CNY"], ["row-two / USD"]]


def test_empty_dataset_keeps_template_row():
    table = _order_table()
    result = expand_table(table, {"total": "0"}, {"orders": []})

    assert table_texts(table) == [
        ["Item", "Price", "Qty"],
        ["${item}", "${price}", "${qty}"],
        ["Total", "0", ""],
    ]
    assert result.rows_inserted == 0
    assert result.template_removed is False


def test_absent_dataset_keeps_template_row():
    table = _order_table()
    expand_table(table, {}, None)

    assert table_texts(table)[0] == ["Item", "Price", "Qty"]
    assert table_texts(table)[1] == ["${item}", "${price}", "${qty}"]


def test_template_row_not_substituted_when_dataset_missing():
    table = _order_table()
    expand_table(table, {"item": "global item"}, {})
    assert table_texts(table)[1][0] == "${item}"


def test_marker_in_last_row_is_cleared_only():
    table = add_table(Document(), [
        ["Name", "${who}"],
        ["Orders ${table:orders}", "x"],
    ])
    result = expand_table(table, {"who": "Zhang"}, {"orders": ORDERS})

    assert table_texts(table) == [["Name", "Zhang"], ["Orders ", "x"]]
    assert result.rows_inserted == 0


def test_only_first_marker_row_is_used():
    table = add_table(Document(), [
        ["${table:first}"],
        ["${v}"],
        ["${table:second}"],
        ["${w}"],
    ])
    result = expand_table(table, {}, {"first": [{"v": "1"}], "second": [{"w": "2"}]})

    assert result.table_name == "first"
    assert table_texts(table) == [[""], ["1"], ["${table:second}"], ["${w}"]]


def test_rows_before_marker_are_substituted():
    table = add_table(Document(), [
        ["Buyer: ${buyer}"],
        ["${table:orders}"],
        ["${item}"],
    ])
    expand_table(table, {"buyer": "ACME"}, {"orders": ORDERS[:1]})

    assert table_texts(table) == [["Buyer: ACME"], [""], ["Product A"]]


def test_table_without_marker_gets_scalar_substitution():
    table = add_table(Document(), [["Name", "${name}"], ["Date", "${date}"]])
    result = expand_table(table, {"name": "Zhang"}, {"orders": ORDERS})

    assert result is None
    assert table_texts(table) == [["Name", "Zhang"], ["Date", "${date}"]]


def test_untouched_table_keeps_text():
    rows = [["a", "b"], ["c", "d ${x}"]]
    table = add_table(Document(), rows)
    expand_table(table, {"unrelated": "1"}, {})
    assert table_texts(table) == rows


def test_new_rows_copy_cell_properties():
    table = _order_table()
    template_tc = table._tbl.tr_lst[1].tc_lst[0]
    template_width = template_tc.tcPr.tcW.w

    expand_table(table, {}, {"orders": ORDERS})

    for tr in table._tbl.tr_lst[1:4]:
        assert len(tr.tc_lst) == 3
        assert tr.tc_lst[0].tcPr.tcW.w == template_width


def test_multiline_template_cell_keeps_line_breaks():
    table = add_table(Document(), [["${table:people}"], ["${name}"]])
    table.cell(1, 0).add_paragraph("${title}")

    expand_table(table, {}, {"people": [{"name": "Zhang", "title": "Engineer"}]})

    assert table.cell(1, 0).text == "Zhang\nEngineer"
    assert len(table.cell(1, 0).paragraphs) == 1


def test_expansion_keeps_non_row_table_children_in_place():
    table = _order_table()
    tbl = table._tbl
    bookmark = OxmlElement("w:bookmarkStart")
    bookmark.set(qn("w:id"), "0")
    bookmark.set(qn("w:name"), "totals")
    tbl.tr_lst[2].addprevious(bookmark)

    expand_table(table, {"total": "600"}, {"orders": ORDERS})

    children = [child for child in tbl if child.tag in (qn("w:tr"), qn("w:bookmarkStart"))]
    tags = [child.tag for child in children]
    assert tags == [qn("w:tr")] * 4 + [qn("w:bookmarkStart"), qn("w:tr")]
    assert table_texts(table)[-1] == ["Total", "600", ""]
