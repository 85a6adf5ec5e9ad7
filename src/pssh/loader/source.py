"""Resolving and opening ssh config sources."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

logger = logging.getLogger(__name__)

SYSTEM_CONFIG = "/etc/ssh/ssh_config"
USER_CONFIG = "~/.ssh/config"

HOME_PREFIX = "~/"


class PsshError(Exception):
    """Base class for pssh errors."""

    pass


class HomeDirectoryError(PsshError):
    """The user's home directory could not be determined."""

    pass


class ConfigLoadError(PsshError):
    """An ssh config file could not be opened, decoded or included."""

    def __init__(self, path: Path | str, reason: str, chain: tuple[Path, ...] = ()):
        self.path = Path(path)
        self.reason = reason
        self.chain = chain
        super().__init__(str(self))

    def __str__(self) -> str:
        message = f"{self.reason} {self.path}"
        if self.chain:
            included_from = " <- ".join(str(p) for p in reversed(self.chain))
            message += f" (included from {included_from})"
        if self.__cause__ is not None:
            message += f": {self.__cause__}"
        return message


def resolve_home() -> Path:
    """Return the current user's home directory."""
    try:
        return Path.home()
    except (RuntimeError, KeyError) as e:
        raise HomeDirectoryError(f"could not get user home directory: {e}") from e


def resolve_path(path: str | Path, home: Path) -> Path:
    """Expand a leading ~/ against home."""
    path = str(path)
    if path.startswith(HOME_PREFIX):
        return home / path[len(HOME_PREFIX):]
    return Path(path)


@contextmanager
def open_source(
    path: str | Path,
    home: Path,
    optional: tuple[str, ...] = (SYSTEM_CONFIG,),
    chain: tuple[Path, ...] = (),
) -> Iterator[IO[str] | None]:
    """
    Open an ssh config file for reading.

    Yields None when the file is missing and path is listed in optional.
    Every other failure raises ConfigLoadError. The file is closed on exit.
    """
    resolved = resolve_path(path, home)

    try:
        f = open(resolved, encoding="utf-8")
    except FileNotFoundError as e:
        if str(path) not in optional:
            raise ConfigLoadError(resolved, "could not open ssh config file", chain) from e
        f = None
    except OSError as e:
        raise ConfigLoadError(resolved, "could not open ssh config file", chain) from e

    if f is None:
        logger.debug(f"Skipping missing optional ssh config {resolved}")
        yield None
        return

    logger.debug(f"Reading ssh config {resolved}")
    with f:
        yield f
