import pytest

from pdfnav.pdfobj import Name, PdfSyntaxError, Ref, decode_text_string, parse_object


def test_parse_number_tree_node():
    node = parse_object("<</Nums[0<</S/r>>5<</S/D/P(A-)/St 3>>]>>")
    nums = node[Name("Nums")]
    assert nums[0] == 0
    assert nums[1] == {Name("S"): Name("r")}
    assert nums[3] == {Name("S"): Name("D"), Name("P"): "A-", Name("St"): 3}


def test_parse_references():
    assert parse_object("<</Kids[12 0 R 13 0 R]>>") == {Name("Kids"): [Ref(12), Ref(13)]}
    # two plain integers are not a reference
    assert parse_object("[1 2]") == [1, 2]


def test_parse_large_number_array():
    pairs = " ".join(f"{i} {i + 1} 0 R" for i in range(0, 20000, 2))
    nums = parse_object(f"<</Nums[{pairs}]>>")[Name("Nums")]
    assert len(nums) == 20000
    assert nums[-2:] == [19998, Ref(19999)]


def test_indirect_object_wrapper():
    assert parse_object("7 0 obj\n<</S/D>>\nendobj") == {Name("S"): Name("D")}


def test_scalars():
    assert parse_object("true") is True
    assert parse_object("false") is False
    assert parse_object("null") is None
    assert parse_object("-4") == -4
    assert parse_object("4.5") == 4.5


def test_strings():
    assert parse_object(r"(a\(b\)c\n)") == "a(b)c\n"
    assert parse_object("(nested (parens))") == "nested (parens)"
    assert parse_object(r"(\101)") == "A"
    assert parse_object("<48656C6C6F>") == "Hello"
    assert parse_object("<FEFF00410042>") == "AB"


def test_name_escapes():
    assert parse_object("/A#20B") == "A B"
    assert repr(Name("S")) == "Name('S')"


def test_comments_are_whitespace():
    assert parse_object("<< /S % style\n /D >>") == {Name("S"): Name("D")}


def test_decode_text_string():
    assert decode_text_string(b"\xef\xbb\xbfcaf\xc3\xa9") == "café"
    assert decode_text_string(b"caf\xe9") == "café"


@pytest.mark.parametrize("source", ["", "<</S", "[1 2", "(open", ")", "<</1 2>>", "bogus"])
def test_malformed(source):
    with pytest.raises(PdfSyntaxError):
        parse_object(source)
