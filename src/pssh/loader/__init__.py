"""SSH config loading module."""

from pssh.loader.hosts import group_hosts, host_from_block, load_hosts, load_inventory
from pssh.loader.parser import decode, expand_include, parse_file
from pssh.loader.source import (
    SYSTEM_CONFIG,
    USER_CONFIG,
    ConfigLoadError,
    HomeDirectoryError,
    PsshError,
    open_source,
    resolve_home,
    resolve_path,
)

__all__ = [
    "SYSTEM_CONFIG",
    "USER_CONFIG",
    "ConfigLoadError",
    "HomeDirectoryError",
    "PsshError",
    "decode",
    "expand_include",
    "group_hosts",
    "host_from_block",
    "load_hosts",
    "load_inventory",
    "open_source",
    "parse_file",
    "resolve_home",
    "resolve_path",
]
