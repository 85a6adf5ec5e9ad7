"""Turn parsed host blocks into canonical, de-duplicated hosts."""

import logging
from pathlib import Path
from typing import Iterable, Sequence

from pssh.loader.parser import parse_file
from pssh.loader.source import SYSTEM_CONFIG
from pssh.types import Host, HostBlock, Inventory, format_aliases, split_aliases

logger = logging.getLogger(__name__)


def host_from_block(block: HostBlock, index: int | None = None) -> Host:
    """Build a provisional Host from one non-wildcard block."""
    name = block.patterns[0]
    hostname = block.get("hostname") or name

    return Host(
        name=name,
        aliases=format_aliases(list(block.patterns[1:])),
        user=block.get("user"),
        hostname=hostname,
        port=block.get("port"),
        proxy_command=block.get("proxycommand"),
        block=index,
    )


def group_hosts(hosts: Iterable[Host]) -> list[Host]:
    """
    Collapse hosts that share a hostname into one record per hostname.

    The first-discovered host of each group is kept as primary. Its aliases
    become its own aliases, then each other member's name followed by that
    member's aliases. Output follows first-discovery order.
    """
    groups: dict[str, list[Host]] = {}
    for host in hosts:
        groups.setdefault(host.hostname, []).append(host)

    result = []
    for hostname, members in groups.items():
        primary = members[0]
        if len(members) == 1:
            result.append(primary)
            continue

        names = split_aliases(primary.aliases)
        for member in members[1:]:
            names.append(member.name)
            names.extend(split_aliases(member.aliases))

        logger.debug(f"Merged {len(members)} entries for {hostname} into {primary.name}")
        result.append(primary.model_copy(update={"aliases": format_aliases(names)}))

    return result


def load_inventory(
    paths: Sequence[str],
    home: Path,
    optional: Sequence[str] = (SYSTEM_CONFIG,),
) -> Inventory:
    """
    Load every config file in order and build the host inventory.

    Grouping runs across all files combined. Any load error aborts the
    whole inventory.
    """
    blocks: list[HostBlock] = []
    for path in paths:
        blocks.extend(parse_file(path, home, optional=tuple(optional)))

    provisional = [host_from_block(block, i) for i, block in enumerate(blocks)]
    hosts = group_hosts(provisional)
    logger.debug(f"Loaded {len(hosts)} hosts from {len(blocks)} blocks")

    return Inventory(blocks=tuple(blocks), hosts=tuple(hosts))


def load_hosts(
    paths: Sequence[str],
    home: Path,
    optional: Sequence[str] = (SYSTEM_CONFIG,),
) -> tuple[Host, ...]:
    """Load the canonical hosts from a list of ssh config files."""
    return load_inventory(paths, home, optional).hosts
