from __future__ import annotations

import re
from pathlib import Path

from .docs_config import (
    DEFAULT_CONTENT_DIR,
    FIRST_FRAMEWORKED_VERSION,
    FRAMEWORKS,
    NEXT_VERSION,
    version_tuple,
)

VERSION_DIR_PATTERN = re.compile(r"^\d+(?:\.\d+)?$")


def get_frameworks() -> list[str]:
    return list(FRAMEWORKS)


def is_frameworked_version(version: str) -> bool:
    """Return True if the docs for ``version`` are built once per framework."""
    if version == NEXT_VERSION:
        return True
    try:
        return version_tuple(version) >= FIRST_FRAMEWORKED_VERSION
    except ValueError:
        return False


def get_docs_versions(content_dir: Path = DEFAULT_CONTENT_DIR) -> list[str]:
    if not content_dir.is_dir():
        return []

    versions = []
    for child in content_dir.iterdir():
        if not child.is_dir():
            continue
        name = child.name
        if name == NEXT_VERSION or VERSION_DIR_PATTERN.match(name):
            versions.append(name)

    def sort_key(name):
        if name == NEXT_VERSION:
            return (1, 0, 0)
        major, minor = version_tuple(name)
        return (0, major, minor)

    return sorted(versions, key=sort_key)


def get_docs_frameworked_versions(build_mode: str, content_dir: Path = DEFAULT_CONTENT_DIR) -> list[str]:
    """List the versions whose docs support more than one framework.

    In ``development`` mode the ``next`` version is always included, even
    before its content directory exists.
    """
    versions = [v for v in get_docs_versions(content_dir) if is_frameworked_version(v)]
    if build_mode == "development" and NEXT_VERSION not in versions:
        versions.append(NEXT_VERSION)
    return versions
