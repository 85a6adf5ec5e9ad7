"""Fuzzy subsequence matching and host filtering."""

from dataclasses import dataclass
from typing import Sequence

from pssh.types import Host

FIRST_CHAR_MATCH_BONUS = 10
MATCH_FOLLOWING_SEPARATOR_BONUS = 20
CAMEL_CASE_MATCH_BONUS = 20
ADJACENT_MATCH_BONUS = 5
UNMATCHED_LEADING_CHAR_PENALTY = -5
MAX_UNMATCHED_LEADING_CHAR_PENALTY = -15

SEPARATORS = frozenset("/-_ .\\@:")


@dataclass(frozen=True)
class Match:
    """A target that contains the pattern as a subsequence."""

    string: str
    index: int
    matched_indexes: tuple[int, ...]
    score: int


def score(pattern: str, target: str) -> tuple[int, tuple[int, ...]] | None:
    """
    Score target against pattern, or return None if it does not match.

    Characters are compared case-insensitively and matched left to right.
    Matches at the start, after a separator, on a camelCase hump or right
    after the previous match earn bonuses. Leading and unmatched characters
    cost points.
    """
    if not pattern:
        return None

    pos = 0
    matched: list[int] = []
    total = 0
    adjacent_bonus = ADJACENT_MATCH_BONUS

    for i, ch in enumerate(target):
        if pos == len(pattern):
            break
        if ch.lower() != pattern[pos].lower():
            continue

        if i == 0:
            total += FIRST_CHAR_MATCH_BONUS
        else:
            prev = target[i - 1]
            if prev in SEPARATORS:
                total += MATCH_FOLLOWING_SEPARATOR_BONUS
            elif prev.islower() and ch.isupper():
                total += CAMEL_CASE_MATCH_BONUS

        if not matched:
            total += max(UNMATCHED_LEADING_CHAR_PENALTY * i, MAX_UNMATCHED_LEADING_CHAR_PENALTY)
        elif matched[-1] == i - 1:
            # Consecutive runs are worth progressively more
            total += adjacent_bonus
            adjacent_bonus += ADJACENT_MATCH_BONUS
        else:
            adjacent_bonus = ADJACENT_MATCH_BONUS

        matched.append(i)
        pos += 1

    if pos < len(pattern):
        return None

    total -= len(target) - len(matched)
    return total, tuple(matched)


def find(pattern: str, targets: Sequence[str]) -> list[Match]:
    """Return matching targets, best score first; ties keep input order."""
    matches = []
    for i, target in enumerate(targets):
        result = score(pattern, target)
        if result is None:
            continue
        total, indexes = result
        matches.append(Match(string=target, index=i, matched_indexes=indexes, score=total))

    matches.sort(key=lambda m: m.score, reverse=True)
    return matches


def filter_hosts(hosts: Sequence[Host], query: str) -> list[Host]:
    """Rank hosts against query. An empty query returns every host in order."""
    if not query:
        return list(hosts)

    targets = [host.searchable() for host in hosts]
    return [hosts[m.index] for m in find(query, targets)]
