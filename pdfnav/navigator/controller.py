from __future__ import annotations

from dataclasses import dataclass, field

from pdfnav.navigator.commands import Command
from pdfnav.navigator.events import Event
from pdfnav.navigator.model import NavigatorContext, NavigatorState, ViewMode
from pdfnav.navigator.reducer import initial_state, reduce


@dataclass
class Navigator:
    """Holds the session state and applies the pure reducer one event at a time.

    Usage:
        navigator = Navigator.start(ctx, view=ViewMode.SPLIT)
        commands = navigator.dispatch(KeyPressed("x"))
    """

    ctx: NavigatorContext
    state: NavigatorState = field(default=None)

    def __post_init__(self) -> None:
        if self.state is None:
            self.state = initial_state(self.ctx)

    @classmethod
    def start(
        cls, ctx: NavigatorContext, view: ViewMode = ViewMode.SEARCH, query: str = ""
    ) -> Navigator:
        return cls(ctx, initial_state(ctx, view, query))

    def dispatch(self, event: Event) -> list[Command]:
        self.state, commands = reduce(self.state, event, self.ctx)
        return commands

    @property
    def finished(self) -> bool:
        return self.state.finished
