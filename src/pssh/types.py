"""Core type definitions for pssh."""

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict

WILDCARD = "*"


@dataclass(frozen=True)
class HostBlock:
    """One pattern-delimited section of an ssh config file."""

    patterns: tuple[str, ...]
    directives: tuple[tuple[str, str], ...] = ()
    source: Path | None = field(default=None, compare=False)

    @property
    def is_wildcard(self) -> bool:
        return bool(self.patterns) and self.patterns[0] == WILDCARD

    def get(self, key: str) -> str:
        """Return the first directive matching key (case-insensitive), or ""."""
        key = key.lower()
        for k, v in self.directives:
            if k.lower() == key:
                return v
        return ""

    def get_all(self, key: str) -> list[str]:
        key = key.lower()
        return [v for k, v in self.directives if k.lower() == key]


class Host(BaseModel):
    """A canonical, selectable remote target."""

    model_config = ConfigDict(frozen=True)

    name: str
    aliases: str = ""
    user: str = ""
    hostname: str
    port: str = ""
    proxy_command: str = ""

    # Index into Inventory.blocks; read-only back-reference
    block: int | None = None

    def row(self) -> tuple[str, str, str, str, str]:
        """Display columns: name, aliases, user, hostname, port."""
        return (self.name, self.aliases, self.user, self.hostname, self.port)

    def searchable(self) -> str:
        return " ".join(self.row())

    def alias_names(self) -> list[str]:
        return split_aliases(self.aliases)


@dataclass(frozen=True)
class Inventory:
    """Parsed blocks plus the canonical hosts built from them."""

    blocks: tuple[HostBlock, ...] = ()
    hosts: tuple[Host, ...] = ()

    def block_for(self, host: Host) -> HostBlock | None:
        if host.block is None:
            return None
        return self.blocks[host.block]

    def find(self, name: str) -> Host | None:
        """Look a host up by name, then by alias."""
        for host in self.hosts:
            if host.name == name:
                return host
        for host in self.hosts:
            if name in host.alias_names():
                return host
        return None


def format_aliases(names: list[str]) -> str:
    """Render alias names as "(a, b, c)", or "" when there are none."""
    if not names:
        return ""
    return f"({', '.join(names)})"


def split_aliases(aliases: str) -> list[str]:
    """Inverse of format_aliases."""
    aliases = aliases.strip()
    if aliases.startswith("(") and aliases.endswith(")"):
        aliases = aliases[1:-1]
    return [a for a in aliases.split(", ") if a]
