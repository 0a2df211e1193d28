from utils.placeholder_scanner import (
    PlaceholderSyntax,
    find_table_marker,
    first_image_placeholder,
    scan,
    strip_table_markers,
    token_for,
)


def test_scan_dollar_reports_keys_and_spans():
    text = "Dear ${userName}, contract ${contractNo}."
    found = scan(text)

    assert [p.key for p in found] == ["userName", "contractNo"]
    assert text[found[0].start:found[0].end] == "${userName}"
    assert found[1].raw == "${contractNo}"


def test_scan_dollar_keeps_key_whitespace():
    assert scan("${ name }")[0].key == " name "


def test_scan_mustache_trims_keys():
    found = scan("Hello {{ name }} and {{other}}", PlaceholderSyntax.MUSTACHE)
    assert [p.key for p in found] == ["name", "other"]


def test_syntaxes_do_not_overlap():
    assert scan("{{name}}") == []
    assert scan("${name}", PlaceholderSyntax.MUSTACHE) == []


def test_token_for_each_syntax():
    assert token_for("sig") == "${sig}"
    assert token_for("sig", PlaceholderSyntax.MUSTACHE) == "{{sig}}"


def test_first_image_placeholder_is_by_position():
    text = "${b} then ${a}"
    found = first_image_placeholder(text, ["a", "b"])
    assert found.key == "b"


def test_first_image_placeholder_none_without_keys():
    assert first_image_placeholder("${a}", []) is None
    assert first_image_placeholder("${a}", ["z"]) is None


def test_table_marker_found_and_stripped():
    marker = find_table_marker("Orders ${table:orderTable} list")
    assert marker.name == "orderTable"
    assert marker.raw == "${table:orderTable}"
    assert strip_table_markers("Orders ${table:orderTable} list") == "Orders  list"


def test_no_marker():
    assert find_table_marker("${orderTable}") is None
    assert find_table_marker("") is None
