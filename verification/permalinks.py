"""Turn scan results into the ordered list of pages to check."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path

import yaml

from .docs_config import NEXT_VERSION, DocsCheckError, version_tuple
from .docs_versions import is_frameworked_version
from .examples_scanner import ScanResult

PATH_CONDITIONS_FILE = "path-conditions.yml"


@dataclass(frozen=True)
class PermalinkEntry:
    path: str
    only_for: frozenset[str] | None = None

    def applies_to(self, framework: str) -> bool:
        return self.only_for is None or framework in self.only_for


@dataclass(frozen=True)
class PathCondition:
    """A rule for the pages whose permalink matches ``pattern``.

    Calling the condition with a version tells whether the matching pages
    are checked for that version at all.
    """

    pattern: str
    min_version: str | None = None
    max_version: str | None = None
    only_for: frozenset[str] | None = None
    skip: bool = False

    def __call__(self, version: str) -> bool:
        if self.skip:
            return False
        if version == NEXT_VERSION:
            return self.max_version is None
        current = version_tuple(version)
        if self.min_version and current < version_tuple(self.min_version):
            return False
        if self.max_version and current > version_tuple(self.max_version):
            return False
        return True

    def matches(self, permalink: str) -> bool:
        return fnmatch(permalink, self.pattern)


def _parse_condition(raw) -> PathCondition:
    if not isinstance(raw, dict) or "pattern" not in raw:
        raise DocsCheckError(f"Path condition needs a pattern: {raw!r}")

    only_for = raw.get("onlyFor")
    if isinstance(only_for, str):
        only_for = [only_for]

    try:
        condition = PathCondition(
            pattern=str(raw["pattern"]),
            min_version=str(raw["minVersion"]) if raw.get("minVersion") is not None else None,
            max_version=str(raw["maxVersion"]) if raw.get("maxVersion") is not None else None,
            only_for=frozenset(only_for) if only_for else None,
            skip=bool(raw.get("skip", False)),
        )
        # Fail on unparsable bounds now rather than mid-crawl.
        for bound in (condition.min_version, condition.max_version):
            if bound is not None:
                version_tuple(bound)
    except ValueError as e:
        raise DocsCheckError(f"Invalid version bound in path condition {raw!r}") from e
    return condition


def fetch_paths_with_conditions(version: str, content_dir: Path) -> dict[str, PathCondition]:
    """Load the path conditions shared by every docs version.

    The file lives at ``<content_dir>/path-conditions.yml``; a list of rules
    with ``pattern`` and optional ``minVersion``, ``maxVersion``,
    ``onlyFor`` and ``skip`` keys. A version-specific file in the version
    directory overrides rules with the same pattern.
    """
    conditions: dict[str, PathCondition] = {}

    for path in (content_dir / PATH_CONDITIONS_FILE, content_dir / version / PATH_CONDITIONS_FILE):
        if not path.is_file():
            continue
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or []
        except yaml.YAMLError as e:
            raise DocsCheckError(f"Cannot parse {path}: {e}") from e
        if not isinstance(data, list):
            raise DocsCheckError(f"{path} must contain a list of path conditions.")

        for raw in data:
            condition = _parse_condition(raw)
            conditions[condition.pattern] = condition

    return conditions


def _page_frameworks(result: ScanResult) -> frozenset[str] | None:
    restrictions = []
    if result.only_for:
        restrictions.append(frozenset(result.only_for))
    if result.unscoped_count == 0 and result.framework_counts:
        restrictions.append(frozenset(result.framework_counts))

    if not restrictions:
        return None
    return frozenset.intersection(*restrictions)


def fetch_permalinks(
    search_results: dict[str, ScanResult],
    version: str,
    paths_with_conditions: dict[str, PathCondition],
) -> list[PermalinkEntry]:
    """Resolve the pages to check, in scan order.

    Pages rejected by a matching path condition are left out. The frameworks
    a page is checked for are narrowed by its front matter, by ``only-for``
    blocks wrapping all of its examples, and by the matching conditions.
    """
    permalinks: list[PermalinkEntry] = []
    seen: set[str] = set()

    for result in search_results.values():
        path = result.permalink
        if path in seen:
            continue

        matching = [c for c in paths_with_conditions.values() if c.matches(path)]
        if not all(condition(version) for condition in matching):
            continue

        only_for = _page_frameworks(result)
        for condition in matching:
            if condition.only_for is not None:
                only_for = condition.only_for if only_for is None else only_for & condition.only_for

        if only_for is not None and not only_for:
            continue

        seen.add(path)
        permalinks.append(PermalinkEntry(path=path, only_for=only_for))

    return permalinks


def extend_permalink(permalink: str, framework: str, version: str) -> str:
    """Build the served path of a page for a framework flavor and version.

    >>> extend_permalink("/column-summary", "react", "12.1")
    '/12.1/react-data-grid/column-summary/'
    >>> extend_permalink("/column-summary", "javascript", "11.1")
    '/11.1/column-summary/'
    """
    segments = [version]
    if is_frameworked_version(version):
        segments.append(f"{framework}-data-grid")
    segments.extend(part for part in permalink.split("/") if part)

    extended = "/" + "/".join(segments)
    if extended.endswith(".html"):
        return extended
    return extended + "/"
