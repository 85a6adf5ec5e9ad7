"""Interactive host selector built on prompt_toolkit, rendered with rich."""

import logging
from typing import Sequence

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.input import Input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.output import Output
from rich.console import Console
from rich.table import Table
from rich.text import Text

from pssh.selector.controller import (
    Backspace,
    Cancel,
    ClearQuery,
    Confirm,
    DeleteWord,
    Event,
    Interrupt,
    MoveCursor,
    SelectionState,
    TypeText,
    initial_state,
    reduce,
    result,
)
from pssh.types import Host

logger = logging.getLogger(__name__)

COLUMNS = [
    ("Name", 20),
    ("Aliases", 15),
    ("User", 10),
    ("Hostname", 25),
    ("Port", 7),
]

DEFAULT_TABLE_HEIGHT = 9
DEFAULT_PLACEHOLDER = "Search SSH hosts..."
HELP_TEXT = " ↑/↓ move • enter connect • esc clear/quit"


def visible_window(cursor: int, total: int, height: int) -> tuple[int, int]:
    """Return the [start, end) slice of rows that keeps cursor on screen."""
    if total <= height:
        return 0, total
    start = min(max(cursor - height + 1, 0), total - height)
    return start, start + height


def render_table(state: SelectionState, width: int, height: int = DEFAULT_TABLE_HEIGHT) -> str:
    """Render the filtered hosts as an ANSI table string."""
    table = Table(box=None, header_style="bold", show_edge=False, pad_edge=False)
    for title, col_width in COLUMNS:
        table.add_column(title, width=col_width, no_wrap=True, overflow="ellipsis")

    start, end = visible_window(state.cursor, len(state.filtered), height)
    for i in range(start, end):
        host = state.filtered[i]
        style = "color(229) on color(57)" if i == state.cursor else None
        table.add_row(*(Text(cell) for cell in host.row()), style=style)

    # Pad so the prompt does not jump around while filtering
    for _ in range(height - (end - start)):
        table.add_row(*([""] * len(COLUMNS)))

    console = Console(width=width, force_terminal=True, color_system="256")
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def render_prompt(state: SelectionState, placeholder: str = DEFAULT_PLACEHOLDER) -> str:
    text = Text("> ", style="bold")
    if state.query:
        text.append(state.query)
    else:
        text.append(placeholder, style="dim")
    text.append(f"  {len(state.filtered)}/{len(state.hosts)}", style="dim")

    console = Console(force_terminal=True, color_system="256")
    with console.capture() as capture:
        console.print(text, end="")
    return capture.get()


def _printable(data: str) -> str:
    if data.startswith("\x1b"):
        return ""
    return "".join(ch for ch in data if ch.isprintable())


class HostSelector:
    """Feeds key presses through the selection reducer until it finishes."""

    def __init__(
        self,
        hosts: Sequence[Host],
        table_height: int = DEFAULT_TABLE_HEIGHT,
        placeholder: str = DEFAULT_PLACEHOLDER,
    ):
        self.state = initial_state(hosts)
        self.table_height = table_height
        self.placeholder = placeholder

    def dispatch(self, event: Event) -> SelectionState:
        self.state = reduce(self.state, event)
        return self.state

    def _key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        def bind(*keys: str, event_factory, eager: bool = False):
            @kb.add(*keys, eager=eager)
            def _(press):
                state = self.dispatch(event_factory(press))
                if state.done:
                    press.app.exit(result=result(state))

        # Unbound special keys also land here; only printable data edits the query
        bind(Keys.Any, event_factory=lambda press: TypeText(_printable(press.data)))
        bind("backspace", event_factory=lambda press: Backspace())
        bind("c-w", event_factory=lambda press: DeleteWord())
        bind("c-u", event_factory=lambda press: ClearQuery())
        for key in ("up", "c-p", "s-tab"):
            bind(key, event_factory=lambda press: MoveCursor(-1))
        for key in ("down", "c-n", "tab"):
            bind(key, event_factory=lambda press: MoveCursor(1))
        bind("enter", event_factory=lambda press: Confirm())
        bind("escape", event_factory=lambda press: Cancel(), eager=True)
        bind("c-c", event_factory=lambda press: Interrupt())

        return kb

    def build_application(
        self,
        input: Input | None = None,
        output: Output | None = None,
    ) -> Application:
        app: Application | None = None

        def table_text():
            # Width is re-read on each render, so a resize only re-lays out.
            width = app.output.get_size().columns if app else 80
            return ANSI(render_table(self.state, width, self.table_height))

        layout = Layout(
            HSplit(
                [
                    Window(
                        FormattedTextControl(
                            lambda: ANSI(render_prompt(self.state, self.placeholder)),
                            show_cursor=False,
                        ),
                        height=1,
                    ),
                    Window(FormattedTextControl(table_text), height=self.table_height + 1),
                    Window(FormattedTextControl(HELP_TEXT, style="class:help"), height=1),
                ]
            )
        )

        app = Application(
            layout=layout,
            key_bindings=self._key_bindings(),
            full_screen=False,
            erase_when_done=True,
            input=input,
            output=output,
        )
        return app

    def run(self, input: Input | None = None, output: Output | None = None) -> Host | None:
        """Run the selector and return the chosen host, or None if cancelled."""
        selected = self.build_application(input=input, output=output).run()
        if selected is None:
            logger.debug("Selection cancelled")
        else:
            logger.debug(f"Selected host {selected.name}")
        return selected


def select_host(
    hosts: Sequence[Host],
    table_height: int = DEFAULT_TABLE_HEIGHT,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> Host | None:
    """Show the interactive selector over hosts."""
    return HostSelector(hosts, table_height=table_height, placeholder=placeholder).run()
