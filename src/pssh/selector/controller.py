"""Host selection state machine.

The selector is a pure reducer: reduce(state, event) returns the next state
and never mutates its input. The interactive app only translates key presses
into events and renders whatever state comes back.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

from pssh.selector.fuzzy import filter_hosts
from pssh.types import Host


class Phase(str, Enum):
    """Controller phases. COMMITTED and CANCELLED are terminal."""

    BROWSING = "browsing"
    FILTERING = "filtering"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SelectionState:
    hosts: tuple[Host, ...]
    filtered: tuple[Host, ...]
    query: str = ""
    cursor: int = 0
    phase: Phase = Phase.BROWSING
    selected: Host | None = None

    @property
    def done(self) -> bool:
        return self.phase in (Phase.COMMITTED, Phase.CANCELLED)


@dataclass(frozen=True)
class TypeText:
    text: str


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class DeleteWord:
    pass


@dataclass(frozen=True)
class ClearQuery:
    pass


@dataclass(frozen=True)
class MoveCursor:
    delta: int


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class Interrupt:
    pass


Event = TypeText | Backspace | DeleteWord | ClearQuery | MoveCursor | Confirm | Cancel | Interrupt


def initial_state(hosts: Sequence[Host]) -> SelectionState:
    hosts = tuple(hosts)
    return SelectionState(hosts=hosts, filtered=hosts)


def _delete_word(query: str) -> str:
    trimmed = query.rstrip()
    cut = trimmed.rfind(" ")
    return trimmed[: cut + 1] if cut >= 0 else ""


def _with_query(state: SelectionState, query: str) -> SelectionState:
    """Recompute the filtered view from scratch for a new query."""
    return replace(
        state,
        query=query,
        filtered=tuple(filter_hosts(state.hosts, query)),
        cursor=0,
        phase=Phase.FILTERING if query else Phase.BROWSING,
    )


def _confirm(state: SelectionState) -> SelectionState:
    if not state.filtered:
        return state

    row = state.filtered[state.cursor].row()
    for host in state.filtered:
        if host.name == row[0]:
            return replace(state, phase=Phase.COMMITTED, selected=host)
    return state


def reduce(state: SelectionState, event: Event) -> SelectionState:
    """Apply one event to the selection state."""
    if state.done:
        return state

    if isinstance(event, TypeText):
        if not event.text:
            return state
        return _with_query(state, state.query + event.text)

    if isinstance(event, Backspace):
        if not state.query:
            return state
        return _with_query(state, state.query[:-1])

    if isinstance(event, DeleteWord):
        if not state.query:
            return state
        return _with_query(state, _delete_word(state.query))

    if isinstance(event, ClearQuery):
        return _with_query(state, "")

    if isinstance(event, MoveCursor):
        if not state.filtered:
            return state
        cursor = min(max(state.cursor + event.delta, 0), len(state.filtered) - 1)
        return replace(state, cursor=cursor)

    if isinstance(event, Confirm):
        return _confirm(state)

    if isinstance(event, Cancel):
        if state.query:
            return _with_query(state, "")
        return replace(state, phase=Phase.CANCELLED)

    if isinstance(event, Interrupt):
        return replace(state, phase=Phase.CANCELLED)

    raise TypeError(f"Unknown selection event: {event!r}")


def result(state: SelectionState) -> Host | None:
    """The host chosen by a committed selection, else None."""
    if state.phase is Phase.COMMITTED:
        return state.selected
    return None
