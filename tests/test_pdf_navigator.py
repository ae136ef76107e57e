import json
from pathlib import Path

import fitz  # PyMuPDF
import pytest
from mcp.shared.memory import (
    create_connected_server_and_client_session as client_session,
)

from conftest import write_pdf

import mcp_pdf_navigator

pytestmark = pytest.mark.anyio


async def call(name: str, arguments: dict) -> dict:
    async with client_session(mcp_pdf_navigator.mcp._mcp_server) as client:
        result = await client.call_tool(name, arguments)
        return json.loads(result.content[0].text)


async def test_list_tools():
    async with client_session(mcp_pdf_navigator.mcp._mcp_server) as client:
        tools = await client.list_tools()
    names = {tool.name for tool in tools.tools}
    assert names == {
        "search_pdf_text",
        "resolve_pdf_pages",
        "get_pdf_page_labels",
        "get_pdf_page_count",
        "extract_pdf_pages",
        "split_pdf",
    }


async def test_search_pdf_text(sample_pdf: Path):
    data = await call("search_pdf_text", {"file": str(sample_pdf), "query": "backprop"})
    assert data["query"] == "backprop"
    pages = [r["page"] for r in data["results"]]
    assert sorted(pages) == [6, 8]
    for result in data["results"]:
        assert 0 <= result["score"] <= 100
        assert len(result["matched_indexes"]) == len("backprop")


async def test_search_pdf_text_limit(sample_pdf: Path):
    data = await call(
        "search_pdf_text", {"file": str(sample_pdf), "query": "e", "limit": 2, "threshold": 0}
    )
    assert len(data["results"]) == 2


async def test_search_pdf_text_errors(sample_pdf: Path, blank_pdf: Path):
    data = await call("search_pdf_text", {"file": str(sample_pdf), "query": ""})
    assert data["error"] == "Both 'file' and 'query' arguments are required"

    data = await call("search_pdf_text", {"file": str(sample_pdf), "query": "a", "limit": 0})
    assert data["error"] == "limit must be positive"

    data = await call("search_pdf_text", {"file": str(blank_pdf), "query": "a"})
    assert "no extractable text" in data["error"]


async def test_resolve_pdf_pages_by_label(roman_pdf: Path):
    data = await call("resolve_pdf_pages", {"file": str(roman_pdf), "pages": "ii-iv,2"})
    assert data == {"pages": [2, 3, 4, 7], "page_labels": ["ii", "iii", "iv", "2"]}


async def test_resolve_pdf_pages_raw(roman_pdf: Path):
    data = await call("resolve_pdf_pages", {"file": str(roman_pdf), "pages": "1-3,5", "raw": True})
    assert data["pages"] == [1, 2, 3, 5]
    assert data["page_labels"] == ["i", "ii", "iii", "v"]


async def test_resolve_pdf_pages_errors(roman_pdf: Path):
    data = await call("resolve_pdf_pages", {"file": str(roman_pdf), "pages": "xx"})
    assert data["error"] == "page label 'xx' not found in PDF"

    data = await call("resolve_pdf_pages", {"file": str(roman_pdf), "pages": "9", "raw": True})
    assert "out of bounds" in data["error"]


async def test_get_pdf_page_labels(roman_pdf: Path):
    data = await call("get_pdf_page_labels", {"file": str(roman_pdf)})
    assert data["page_count"] == 8
    assert data["page_labels"]["0"] == "i"
    assert data["page_labels"]["4"] == "v"
    assert data["page_labels"]["5"] == "1"


async def test_get_pdf_page_labels_slice(roman_pdf: Path):
    data = await call("get_pdf_page_labels", {"file": str(roman_pdf), "start": 3, "limit": 3})
    assert data["page_labels"] == {"3": "iv", "4": "v", "5": "1"}


async def test_get_pdf_page_labels_errors(roman_pdf: Path):
    data = await call("get_pdf_page_labels", {"file": str(roman_pdf), "start": -1})
    assert data["error"] == "start must be non-negative"
    data = await call("get_pdf_page_labels", {"file": str(roman_pdf), "limit": 0})
    assert data["error"] == "limit must be positive"


async def test_get_pdf_page_count(sample_pdf: Path, tmp_path: Path):
    assert await call("get_pdf_page_count", {"file": str(sample_pdf)}) == {"page_count": 8}

    data = await call("get_pdf_page_count", {"file": str(tmp_path / "missing.pdf")})
    assert "input file not found" in data["error"]


async def test_extract_pdf_pages(roman_pdf: Path, tmp_path: Path):
    out = tmp_path / "front.pdf"
    data = await call(
        "extract_pdf_pages", {"file": str(roman_pdf), "pages": "iii,i", "output": str(out)}
    )
    assert data == {"output": str(out), "pages": [3, 1]}
    with fitz.open(out) as doc:
        assert doc.page_count == 2


async def test_extract_pdf_pages_into_directory(sample_pdf: Path, tmp_path: Path):
    data = await call(
        "extract_pdf_pages",
        {"file": str(sample_pdf), "pages": "1-3,5", "output": str(tmp_path / "sel"), "raw": True},
    )
    assert Path(data["output"]) == tmp_path / "sel" / "book_pages_1-3_5.pdf"
    assert Path(data["output"]).exists()


async def test_split_pdf(sample_pdf: Path, tmp_path: Path):
    out_dir = tmp_path / "parts"
    data = await call(
        "split_pdf", {"file": str(sample_pdf), "split_points": [6, 3], "output_dir": str(out_dir)}
    )
    assert data["segments"] == [[1, 2], [3, 5], [6, 8]]
    assert [Path(f).name for f in data["files"]] == [
        "book_p1-2.pdf",
        "book_p3-5.pdf",
        "book_p6-8.pdf",
    ]
    assert all(Path(f).exists() for f in data["files"])


async def test_split_pdf_rejects_invalid_points(sample_pdf: Path):
    data = await call("split_pdf", {"file": str(sample_pdf), "split_points": [1, 9]})
    assert data["error"] == "split points must be between 2 and 8: [1, 9]"


def test_tools_callable_directly(sample_pdf: Path):
    """The tool functions stay plain callables for CLI reuse."""
    assert mcp_pdf_navigator.get_pdf_page_count(str(sample_pdf)) == {"page_count": 8}
    assert mcp_pdf_navigator.get_pdf_page_count("") == {"error": "'file' argument is required"}
    res = mcp_pdf_navigator.get_pdf_page_labels(str(sample_pdf), start=6)
    assert res["page_labels"] == {"6": "7", "7": "8"}


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 B"), (532, "532 B"), (1536, "1.5 KB"), (2 * 1024 * 1024, "2.0 MB")],
)
def test_format_file_size(size, expected):
    assert mcp_pdf_navigator.format_file_size(size) == expected


@pytest.mark.skipif(not Path("/proc").is_dir(), reason="needs an unwritable /proc")
async def test_split_pdf_reports_write_failure(sample_pdf: Path):
    data = await call("split_pdf", {"file": str(sample_pdf), "split_points": [3], "output_dir": "/proc"})
    assert "failed to write" in data["error"]


async def test_extract_pdf_pages_reports_write_failure(sample_pdf: Path, tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    data = await call(
        "extract_pdf_pages",
        {"file": str(sample_pdf), "pages": "1", "output": str(blocker / "x.pdf"), "raw": True},
    )
    assert "error" in data


async def test_resolve_pdf_pages_with_dashed_labels(tmp_path: Path):
    pdf = write_pdf(
        tmp_path / "appendix.pdf",
        ["Intro", "Appendix one", "Appendix two"],
        [
            {"startpage": 0, "prefix": "", "style": "r", "firstpagenum": 1},
            {"startpage": 1, "prefix": "A-", "style": "D", "firstpagenum": 1},
        ],
    )
    data = await call("resolve_pdf_pages", {"file": str(pdf), "pages": "A-2"})
    assert data == {"pages": [3], "page_labels": ["A-2"]}
