import pytest

from pdfnav.errors import PdfNavError
from pdfnav.search import SearchResult, format_result, static_search
from pdfnav.text_index import Line

LINES = [
    Line(1, "Preface"),
    Line(4, "The quick brown fox"),
    Line(6, "Gradient descent and backpropagation"),
    Line(8, "backpropagation, 6"),
]


def test_static_search_reports_pages():
    results = static_search(LINES, "backprop", max_results=10, threshold=0)
    assert sorted(r.page for r in results) == [6, 8]
    assert all(0 <= r.score <= 100 for r in results)


def test_static_search_limits_results():
    results = static_search(LINES, "e", max_results=2, threshold=0)
    assert len(results) == 2


def test_static_search_threshold_filters():
    assert [r.page for r in static_search(LINES, "hk", max_results=10, threshold=0)] == [4]
    assert static_search(LINES, "hk", max_results=10, threshold=1) == []


def test_static_search_requires_query():
    with pytest.raises(PdfNavError, match="provide a query"):
        static_search(LINES, "", max_results=10, threshold=0)


def test_as_dict():
    result = SearchResult(page=4, score=87, text="fox", matched_indexes=(0, 1))
    assert result.as_dict() == {"page": 4, "score": 87, "text": "fox", "matched_indexes": [0, 1]}


def test_format_result_plain_text():
    result = SearchResult(page=4, score=87, text="brown fox", matched_indexes=(6, 7, 8))
    assert format_result(result).plain == "  p.4    [ 87%]  brown fox"
