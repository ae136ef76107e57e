"""Tests for page-label parsing, generation and number-tree traversal."""

import pytest

from conftest import write_pdf

from pdfnav.document import PdfDocument
from pdfnav.errors import DocumentError
from pdfnav.labels import (
    LabelEntry,
    LabelStyle,
    NumberTreeVisitor,
    build_label_map,
    find_entry,
    generate_labels,
    parse_label_descriptor,
    read_page_labels,
    to_alpha,
    to_roman,
)
from pdfnav.pdfobj import Name, Ref, parse_object


def test_no_entries_gives_decimal_labels():
    for page_count in (1, 2, 7):
        assert generate_labels([], page_count) == [str(i) for i in range(1, page_count + 1)]


def test_to_alpha():
    assert to_alpha(1) == "a"
    assert to_alpha(26) == "z"
    assert to_alpha(27) == "aa"
    assert to_alpha(28) == "ab"
    assert to_alpha(52) == "az"
    assert to_alpha(53) == "ba"
    assert to_alpha(3, upper=True) == "C"


def test_to_roman():
    assert to_roman(1) == "i"
    assert to_roman(4) == "iv"
    assert to_roman(9) == "ix"
    assert to_roman(14) == "xiv"
    assert to_roman(1994) == "mcmxciv"
    assert to_roman(3999, upper=True) == "MMMCMXCIX"


def test_roman_uses_only_canonical_symbols():
    for n in range(1, 4000):
        assert set(to_roman(n)) <= set("mdclxvi")
        assert "iiii" not in to_roman(n)


def test_non_positive_numbers_fall_back_to_decimal():
    assert to_roman(0) == "0"
    assert to_alpha(-2) == "-2"


def test_generate_labels_with_styles_and_prefix():
    entries = [
        LabelEntry(0, LabelStyle.ROMAN_LOWER),
        LabelEntry(3, LabelStyle.DECIMAL),
        LabelEntry(5, LabelStyle.DECIMAL, prefix="A-", start_value=1),
        LabelEntry(7, LabelStyle.NONE, prefix="Cover"),
    ]
    assert generate_labels(entries, 8) == ["i", "ii", "iii", "1", "2", "A-1", "A-2", "Cover"]


def test_first_entry_governs_pages_before_it():
    entries = [LabelEntry(2, LabelStyle.DECIMAL, start_value=10)]
    # pages 0 and 1 precede the entry but still use it
    assert generate_labels(entries, 4) == ["8", "9", "10", "11"]
    assert find_entry(entries, 0) is entries[0]


def test_label_map_keeps_duplicates():
    labels = ["1", "2", "1", "2", "3"]
    assert build_label_map(labels) == {"1": [1, 3], "2": [2, 4], "3": [5]}


def test_parse_label_descriptor_defaults():
    entry = parse_label_descriptor(4, {Name("S"): Name("R"), Name("St"): 3})
    assert entry == LabelEntry(4, LabelStyle.ROMAN_UPPER, "", 3)

    # unknown style and non-dict descriptors keep the defaults
    assert parse_label_descriptor(1, {Name("S"): Name("Q")}).style is LabelStyle.NONE
    assert parse_label_descriptor(2, 17) == LabelEntry(2)


def test_visitor_reads_inline_tree():
    root = parse_object("<</Nums[0<</S/r>>5<</S/D/P(A-)>>]>>")
    entries = NumberTreeVisitor().visit(root)
    assert entries == [
        LabelEntry(0, LabelStyle.ROMAN_LOWER),
        LabelEntry(5, LabelStyle.DECIMAL, "A-"),
    ]


def test_visitor_follows_kids_and_sorts():
    objects = {
        2: parse_object("<</Nums[10<</S/a>>]>>"),
        3: parse_object("<</Nums[0<</S/r>>4<</S/D>>]>>"),
    }
    root = parse_object("<</Kids[2 0 R 3 0 R]>>")
    visitor = NumberTreeVisitor(lambda ref: objects[ref.xref])
    entries = visitor.visit(root)
    assert [e.start_index for e in entries] == [0, 4, 10]
    assert visitor.skipped == 0


def test_visitor_terminates_on_cycle():
    objects = {
        1: parse_object("<</Kids[2 0 R]/Nums[0<</S/D>>]>>"),
        2: parse_object("<</Kids[1 0 R]/Nums[3<</S/r>>]>>"),
    }
    visitor = NumberTreeVisitor(lambda ref: objects[ref.xref])
    entries = visitor.visit(Ref(1))
    assert [e.start_index for e in entries] == [0, 3]
    assert visitor.skipped == 1


def test_visitor_skips_self_reference():
    objects = {1: parse_object("<</Kids[1 0 R]/Nums[0<</S/D>>]>>")}
    visitor = NumberTreeVisitor(lambda ref: objects[ref.xref])
    assert len(visitor.visit(Ref(1))) == 1


def test_visitor_skips_malformed_nodes():
    def resolve(ref):
        if ref.xref == 9:
            raise DocumentError("broken xref")
        return {2: 42, 3: parse_object("<</Nums[2<</S/R>>]>>")}[ref.xref]

    root = parse_object("<</Kids[9 0 R 2 0 R 3 0 R]/Nums[(x)<</S/D>>-1<</S/D>>0<</S/r>>]>>")
    visitor = NumberTreeVisitor(resolve)
    entries = visitor.visit(root)
    assert entries == [LabelEntry(0, LabelStyle.ROMAN_LOWER), LabelEntry(2, LabelStyle.ROMAN_UPPER)]
    # unreadable kid, non-dict kid, string key, negative key
    assert visitor.skipped == 4


def test_visitor_depth_cap():
    # 0 -> 1 -> 2 -> ... each a distinct object
    objects = {i: {Name("Kids"): [Ref(i + 1)], Name("Nums"): [i, {}]} for i in range(10)}
    visitor = NumberTreeVisitor(lambda ref: objects.get(ref.xref), max_depth=3)
    entries = visitor.visit(Ref(0))
    assert [e.start_index for e in entries] == [0, 1, 2, 3]
    assert visitor.skipped == 1


def test_read_page_labels_from_pdf(roman_pdf):
    with PdfDocument.open(roman_pdf) as document:
        label_map, labels = read_page_labels(document)
    assert labels == ["i", "ii", "iii", "iv", "v", "1", "2", "3"]
    assert label_map["iv"] == [4]
    assert label_map["1"] == [6]


def test_read_page_labels_without_tree(sample_pdf):
    with PdfDocument.open(sample_pdf) as document:
        assert document.read_page_label_tree() is None
        _, labels = read_page_labels(document)
    assert labels == [str(i) for i in range(1, 9)]


@pytest.mark.parametrize(
    "style, expected",
    [("a", ["a", "b", "c"]), ("A", ["A", "B", "C"]), ("R", ["I", "II", "III"])],
)
def test_read_page_labels_styles(tmp_path, style, expected):
    pdf = write_pdf(
        tmp_path / "styled.pdf",
        ["one", "two", "three"],
        [{"startpage": 0, "prefix": "", "style": style, "firstpagenum": 1}],
    )
    with PdfDocument.open(pdf) as document:
        _, labels = read_page_labels(document)
    assert labels == expected
