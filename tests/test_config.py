from pathlib import Path

from pdfnav.config import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_THRESHOLD,
    VIEWER_ENV_VAR,
    NavigatorConfig,
    ViewerConfig,
    output_dir_for,
)
from pdfnav.navigator import ViewMode


def test_viewer_command_substitutes_page_and_absolute_file(tmp_path: Path):
    viewer = ViewerConfig(executable="sioyek")
    pdf = tmp_path / "book.pdf"
    assert viewer.command(pdf, 12) == [
        "sioyek",
        "--reuse-window",
        "--page",
        "12",
        str(pdf.resolve()),
    ]


def test_viewer_env_override(monkeypatch):
    monkeypatch.setenv(VIEWER_ENV_VAR, "/opt/viewer")
    assert ViewerConfig.discover().executable == "/opt/viewer"


def test_navigator_config_defaults(monkeypatch):
    monkeypatch.setenv(VIEWER_ENV_VAR, "viewer")
    config = NavigatorConfig()
    assert config.output_dir is None
    assert config.max_results == DEFAULT_MAX_RESULTS == 20
    assert config.threshold == DEFAULT_THRESHOLD == 30
    assert config.start_view is ViewMode.SEARCH
    assert config.viewer.executable == "viewer"


def test_output_dir_for():
    assert output_dir_for(None) is None
    assert output_dir_for("") is None
    assert output_dir_for("parts") == Path("parts")
    assert output_dir_for("out/book.pdf") == Path("out")
    assert output_dir_for("book.PDF") is None
