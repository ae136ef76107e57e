"""Runs navigator commands as background tasks and drives the event loop.

Every background action reports back through the event stream with exactly
one event; the loop never waits on them directly.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import anyio
from anyio.abc import TaskGroup
from anyio.streams.memory import MemoryObjectSendStream

from pdfnav.config import ViewerConfig
from pdfnav.document import PdfDocument
from pdfnav.navigator import (
    Command,
    ExtractionDone,
    ExtractSegments,
    Frame,
    Navigator,
    NavigatorContext,
    NavigatorState,
    OpenViewer,
    Quit,
    ViewerLaunched,
    render,
)
from pdfnav.segments import Segment
from pdfnav.split import extract_segments

logger = logging.getLogger(__name__)

MAX_PENDING_EVENTS = 64


def launch_viewer(viewer: ViewerConfig, file: str | Path, page: int) -> subprocess.Popen:
    """Start the viewer detached from this process; the child is never waited on.

    Raises:
        OSError: If the executable cannot be started.
    """
    command = viewer.command(file, page)
    logger.debug("Launching viewer: %s", command)
    return subprocess.Popen(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


class AsyncExecutor:
    """Turns commands into background tasks inside ``task_group``.

    Args:
        task_group: Group that owns the background tasks.
        events: Stream the completion events are sent to.
        document: Open source document.
        ctx: Session context (output directory, base name, filename).
        viewer: External viewer settings.
    """

    def __init__(
        self,
        task_group: TaskGroup,
        events: MemoryObjectSendStream,
        document: PdfDocument,
        ctx: NavigatorContext,
        viewer: ViewerConfig,
    ) -> None:
        self._task_group = task_group
        self._events = events
        self._document = document
        self._ctx = ctx
        self._viewer = viewer

    def run(self, command: Command) -> None:
        if isinstance(command, ExtractSegments):
            self._task_group.start_soon(self._extract, command.segments)
        elif isinstance(command, OpenViewer):
            self._task_group.start_soon(self._open_viewer, command.page)
        else:
            raise TypeError(f"command not handled by the executor: {command!r}")

    async def _extract(self, segments: Sequence[Segment]) -> None:
        # The navigator ignores input while busy, so nothing else touches the
        # document until this finishes.
        try:
            written = await anyio.to_thread.run_sync(
                extract_segments,
                self._document,
                segments,
                self._ctx.output_dir,
                self._ctx.base_name,
            )
        except Exception as exc:  # any failure still ends the session with one event
            logger.error("Extraction failed: %s", exc)
            await self._events.send(ExtractionDone(error=str(exc)))
            return
        logger.info("Created %d file(s)", len(written))
        await self._events.send(ExtractionDone(count=len(written)))

    async def _open_viewer(self, page: int) -> None:
        try:
            await anyio.to_thread.run_sync(
                launch_viewer, self._viewer, self._ctx.filename, page
            )
        except OSError as exc:
            logger.warning("Viewer launch failed: %s", exc)
            await self._events.send(ViewerLaunched(error=str(exc)))
            return
        await self._events.send(ViewerLaunched())


class Terminal(Protocol):
    """Surface the event loop draws to and reads input from."""

    def draw(self, frame: Frame) -> None: ...

    async def pump(self, events: MemoryObjectSendStream) -> None: ...


async def run_event_loop(
    navigator: Navigator,
    document: PdfDocument,
    viewer: ViewerConfig,
    terminal: Terminal,
) -> NavigatorState:
    """Process events one at a time until the navigator asks to quit.

    Returns:
        The final navigator state.
    """
    send, receive = anyio.create_memory_object_stream(MAX_PENDING_EVENTS)
    async with anyio.create_task_group() as tg:
        executor = AsyncExecutor(tg, send, document, navigator.ctx, viewer)
        tg.start_soon(terminal.pump, send.clone())
        terminal.draw(render(navigator.state, navigator.ctx))

        async with receive:
            async for event in receive:
                commands = navigator.dispatch(event)
                terminal.draw(render(navigator.state, navigator.ctx))
                if any(isinstance(command, Quit) for command in commands):
                    break
                for command in commands:
                    executor.run(command)
        tg.cancel_scope.cancel()
    return navigator.state
