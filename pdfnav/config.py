"""Session configuration.

One :class:`NavigatorConfig` is built by the CLI (or a test) and handed to
every component that needs it; nothing reads package-level flags.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from pdfnav.navigator.model import ViewMode

# Default parameters
DEFAULT_MAX_RESULTS = 20
DEFAULT_THRESHOLD = 30

# Viewer discovery - will check availability at startup
VIEWER_ENV_VAR = "PDFNAV_VIEWER"
VIEWER_EXECUTABLE: str | None = shutil.which("sioyek")
VIEWER_FALLBACK = "/Applications/sioyek.app/Contents/MacOS/sioyek"
VIEWER_ARGS = ("--reuse-window", "--page", "{page}", "{file}")


@dataclass(frozen=True)
class ViewerConfig:
    """External viewer invocation.

    ``args`` is a template; ``{page}`` and ``{file}`` are substituted per launch.
    """

    executable: str = VIEWER_FALLBACK
    args: tuple[str, ...] = VIEWER_ARGS

    @classmethod
    def discover(cls) -> ViewerConfig:
        executable = os.environ.get(VIEWER_ENV_VAR) or VIEWER_EXECUTABLE
        return cls(executable=executable or VIEWER_FALLBACK)

    def command(self, file: str | Path, page: int) -> list[str]:
        absolute = str(Path(file).resolve())
        return [self.executable] + [
            arg.format(page=page, file=absolute) for arg in self.args
        ]


@dataclass(frozen=True)
class NavigatorConfig:
    output_dir: Path | None = None
    viewer: ViewerConfig = field(default_factory=ViewerConfig.discover)
    max_results: int = DEFAULT_MAX_RESULTS
    threshold: int = DEFAULT_THRESHOLD
    initial_query: str = ""
    start_view: ViewMode = ViewMode.SEARCH


def output_dir_for(output: str | None) -> Path | None:
    """Directory that segment files go to for a user-supplied ``-o`` value.

    A value ending in ``.pdf`` names a file, so its parent directory is used.
    An empty value means the current directory.
    """
    if not output:
        return None
    path = Path(output)
    if path.suffix.lower() == ".pdf":
        parent = path.parent
        return None if parent == Path(".") else parent
    return path
