"""Interactive host selection module."""

from pssh.selector.app import HostSelector, render_table, select_host
from pssh.selector.controller import Phase, SelectionState, initial_state, reduce, result
from pssh.selector.fuzzy import Match, filter_hosts, find, score

__all__ = [
    "HostSelector",
    "Match",
    "Phase",
    "SelectionState",
    "filter_hosts",
    "find",
    "initial_state",
    "reduce",
    "render_table",
    "result",
    "score",
    "select_host",
]
