"""Settings and the version grammar for the docs example checker."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

# Port to serve the static docs pages under.
PORT = int(os.environ.get("DOCS_CHECK_PORT", "8088"))

# Milliseconds to wait for the http server to start serving the docs.
FILE_SERVE_TIMEOUT = 300

# Milliseconds to wait for the examples to initialize between two tries.
EXAMPLE_INIT_TIMEOUT = 300

# Extra tries when the rendered instance count differs from the expected one.
CHECK_TRIES = 2

DEFAULT_FRAMEWORK = "javascript"
FRAMEWORKS = ["javascript", "react"]

# First docs version built per framework flavor.
FIRST_FRAMEWORKED_VERSION = (12, 0)

NEXT_VERSION = "next"

DEFAULT_CONTENT_DIR = Path(os.environ.get("DOCS_CONTENT_DIR", "docs/content"))
DEFAULT_DIST_DIR = Path(os.environ.get("DOCS_DIST_DIR", "docs/.vuepress/dist"))

# "MAJOR" or "MAJOR.MINOR", without leading zeros; valid semver once padded with ".0".
DOCS_VERSION_PATTERN = re.compile(r"^(0|[1-9]\d*)(?:\.(0|[1-9]\d*))?$")


class DocsCheckError(Exception):
    """Raised when the check cannot run with the given input."""


class InvalidVersionError(DocsCheckError):
    def __init__(self, version: str) -> None:
        super().__init__(f"Invalid version number: {version!r}.")
        self.version = version


def validate_version(version: str | None) -> str:
    """Return ``version`` unchanged if it names a docs version.

    Docs versions are ``next`` or a ``MAJOR.MINOR`` pair (a bare ``MAJOR``
    is read as ``MAJOR.0``). Full ``MAJOR.MINOR.PATCH`` strings, pre-release
    and build suffixes are rejected.
    """
    if not version:
        raise InvalidVersionError(str(version))

    if version == NEXT_VERSION:
        return version

    if not DOCS_VERSION_PATTERN.fullmatch(version):
        raise InvalidVersionError(version)

    return version


def version_tuple(version: str) -> tuple[int, int]:
    major, _, minor = version.partition(".")
    return int(major), int(minor or 0)


@dataclass
class CheckConfig:
    """Resolved settings for a single run."""

    version: str
    content_dir: Path = DEFAULT_CONTENT_DIR
    dist_dir: Path = DEFAULT_DIST_DIR
    port: int = PORT
    headless: bool = True
    check_tries: int = CHECK_TRIES
    file_serve_timeout: int = FILE_SERVE_TIMEOUT
    example_init_timeout: int = EXAMPLE_INIT_TIMEOUT

    @property
    def base_url(self) -> str:
        return f"http://localhost:{self.port}/docs"
