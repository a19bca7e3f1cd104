"""
Explorer event loop.

Single-threaded: read one key, dispatch, render. A reload is split in two
frames so the loading message is on screen before the blocking work runs:

    ReloadRequested  -> state.loading is set, frame is rendered
    load + build     -> runs synchronously
    ReloadFinished   -> the new snapshot is swapped in as one value
"""

import logging
from pathlib import Path
from typing import Callable, Optional

import click
from rich.console import Console
from rich.live import Live

from ..config import ExplorerConfig
from ..core.exceptions import SpecLoadError
from ..core.index import build_index
from ..core.result import Err, Result, map_ok
from ..parsing.openapi import load_spec
from .keys import decode_key
from .render import render
from .state import ReloadFinished, SelectionState, dispatch, initial_state
from .views import Snapshot

logger = logging.getLogger(__name__)


class ExplorerApp:
    """
    Interactive explorer over one spec file.

    Args:
        spec_path: Spec document, re-read on every reload.
        config: Build configuration.
        console: Rich console to draw on.
        read_key: Key source; `click.getchar` unless a test supplies one.
    """

    def __init__(
        self,
        spec_path: Path,
        config: Optional[ExplorerConfig] = None,
        console: Optional[Console] = None,
        read_key: Callable[[], str] = click.getchar,
    ):
        self.spec_path = Path(spec_path)
        self.config = config or ExplorerConfig()
        self.console = console or Console()
        self.read_key = read_key

    def load(self) -> Result[Snapshot, Exception]:
        """Read, resolve and index the spec. Never raises for bad input."""
        try:
            spec = load_spec(self.spec_path)
        except SpecLoadError as e:
            logger.warning(f"Load failed: {e}")
            return Err(e)

        return map_ok(
            build_index(spec, self.config),
            lambda output: Snapshot.from_output(output, self.config),
        )

    def start(self) -> Result[SelectionState, Exception]:
        return map_ok(self.load(), initial_state)

    def handle_key(self, state: SelectionState, key: str) -> SelectionState:
        event = decode_key(key, state.mode)
        if event is None:
            return state
        return dispatch(event, state)

    def finish_reload(self, state: SelectionState) -> SelectionState:
        """Second reload phase: build, then swap or keep the old snapshot."""
        return dispatch(ReloadFinished(self.load()), state)

    def run(self, state: SelectionState) -> SelectionState:
        """Drive the loop until the user quits. Returns the final state."""
        with Live(
            render(state, self.console.height),
            console=self.console,
            screen=True,
            auto_refresh=False,
        ) as live:
            while not state.should_quit:
                try:
                    key = self.read_key()
                except (KeyboardInterrupt, EOFError):
                    break

                state = self.handle_key(state, key)
                live.update(render(state, self.console.height), refresh=True)

                if state.loading:
                    state = self.finish_reload(state)
                    live.update(render(state, self.console.height), refresh=True)

        return state
