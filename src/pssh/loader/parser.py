"""SSH config parsing with recursive Include resolution."""

import glob
import io
import logging
import shlex
from pathlib import Path
from typing import IO, Iterable

from paramiko.config import SSHConfig
from paramiko.ssh_exception import ConfigParseError

from pssh.loader.source import SYSTEM_CONFIG, ConfigLoadError, open_source, resolve_path
from pssh.types import HostBlock

logger = logging.getLogger(__name__)

# Same nesting limit as OpenSSH's readconf
MAX_INCLUDE_DEPTH = 16

GLOB_CHARS = frozenset("*?[")


def decode(stream: IO[str], source: Path | None = None) -> list[HostBlock]:
    """
    Decode an ssh config stream into host blocks, in file order.

    paramiko does the tokenizing: keys are lower-cased, quoted values are
    unwrapped and a repeated key keeps its first value. Lines before the
    first Host keyword land in an implicit "Host *" block. Match blocks come
    back with no patterns.

    Include is the exception to first-value-wins: every Include line of a
    block is kept, in the order it was written.
    """
    text = stream.read()
    config = SSHConfig()
    config.parse(io.StringIO(text))

    includes = _include_lines(text)

    blocks = []
    for entry, block_includes in zip(config._config, includes):
        patterns = tuple(entry.get("host", []))
        items = [(k, v) for k, v in entry.get("config", {}).items() if k != "include"]
        directives = tuple(_directives(items)) + tuple(("include", v) for v in block_includes)
        blocks.append(HostBlock(patterns=patterns, directives=directives, source=source))
    return blocks


def _include_lines(text: str) -> list[list[str]]:
    """Include values per block, split on the same Host/Match boundaries paramiko uses."""
    blocks: list[list[str]] = [[]]
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        match = SSHConfig.SETTINGS_REGEX.match(line)
        if match is None:
            continue
        key, value = match.group(1).lower(), match.group(2)
        if key in ("host", "match"):
            blocks.append([])
        elif key == "include":
            blocks[-1].append(value)
    return blocks


def _directives(items: Iterable[tuple[str, object]]) -> Iterable[tuple[str, str]]:
    for key, value in items:
        if value is None:
            # ProxyCommand none
            yield key, ""
        elif isinstance(value, list):
            # identityfile, localforward, remoteforward accumulate
            for v in value:
                yield key, v
        else:
            yield key, str(value)


def expand_include(value: str, base_dir: Path, home: Path) -> list[Path]:
    """
    Turn an Include value into the list of files it names.

    Relative paths are taken from base_dir, which is ~/.ssh for user
    configs and /etc/ssh for the system config. Glob patterns expand in
    sorted order and may match nothing.
    """
    targets = []
    for token in shlex.split(value):
        path = resolve_path(token, home)
        if not path.is_absolute():
            path = base_dir / path

        if GLOB_CHARS.intersection(token):
            matches = sorted(glob.glob(str(path)))
            if not matches:
                logger.debug(f"Include pattern {path} matched no files")
            targets.extend(Path(m) for m in matches if Path(m).is_file())
        else:
            targets.append(path)
    return targets


def include_base(path: Path, home: Path) -> Path:
    """Directory that relative Include paths in the config at path resolve against."""
    if path == Path(SYSTEM_CONFIG):
        return path.parent
    return home / ".ssh"


def parse_file(
    path: str | Path,
    home: Path,
    optional: tuple[str, ...] = (SYSTEM_CONFIG,),
    chain: tuple[Path, ...] = (),
    include_dir: Path | None = None,
) -> list[HostBlock]:
    """
    Parse one ssh config file into its selectable host blocks.

    Wildcard blocks are not returned, but every Include they carry is parsed
    recursively and its blocks are spliced in at the point of inclusion.
    Blocks without patterns are dropped. chain holds the files currently
    being included, outermost first. include_dir is where relative Include
    paths are looked up; it is fixed by the outermost file.
    """
    resolved = resolve_path(path, home)
    if include_dir is None:
        include_dir = include_base(resolved, home)
    real = resolved.resolve()

    if real in chain:
        raise ConfigLoadError(resolved, "include cycle detected at", chain)
    if len(chain) >= MAX_INCLUDE_DEPTH:
        raise ConfigLoadError(resolved, "include nesting too deep at", chain)

    with open_source(path, home, optional, chain) as stream:
        if stream is None:
            return []
        try:
            blocks = decode(stream, resolved)
        except (ConfigParseError, UnicodeDecodeError) as e:
            raise ConfigLoadError(resolved, "could not decode ssh config file", chain) from e

    result = []
    for block in blocks:
        if not block.patterns:
            continue

        if not block.is_wildcard:
            result.append(block)
            continue

        for include in block.get_all("include"):
            try:
                targets = expand_include(include, include_dir, home)
            except ValueError as e:
                raise ConfigLoadError(resolved, "invalid Include directive in", chain) from e

            for target in targets:
                logger.debug(f"Following Include {target} from {resolved}")
                result.extend(
                    parse_file(target, home, optional=(), chain=chain + (real,), include_dir=include_dir)
                )

    return result
