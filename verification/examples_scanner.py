"""Find the example containers declared in the markdown docs sources.

A container opens with a ``::: example`` line and closes with a bare
``:::`` line. Containers nested in an ``::: only-for <frameworks>`` block
are rendered only for those frameworks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .docs_config import DocsCheckError

CONTAINER_OPEN_PATTERN = re.compile(r"^\s*:::\s*([\w-]+)(.*)$")
CONTAINER_CLOSE_PATTERN = re.compile(r"^\s*:::\s*$")
FENCE_PATTERN = re.compile(r"^\s*(`{3,}|~{3,})(.*)$")


@dataclass
class ScanResult:
    """Example containers found in one docs page.

    Attributes:
        file_path: Markdown source, relative to the version directory
        permalink: Page permalink from the front matter (or derived from the path)
        example_count: Number of example containers on the page
        framework_counts: Containers scoped with ``only-for``, per framework
        unscoped_count: Containers rendered for every framework
        only_for: Page-level framework restriction from the front matter
    """

    file_path: str
    permalink: str
    example_count: int = 0
    framework_counts: dict[str, int] = field(default_factory=dict)
    unscoped_count: int = 0
    only_for: tuple[str, ...] | None = None


def split_front_matter(content: str) -> tuple[dict, str]:
    if not content.startswith("---"):
        return {}, content

    end = content.find("\n---", 3)
    if end == -1:
        return {}, content

    raw = content[3:end]
    body = content[end + 4 :]
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise DocsCheckError(f"Invalid front matter: {e}") from e
    if not isinstance(data, dict):
        return {}, body
    return data, body


def _as_frameworks(value) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split()
    return tuple(str(item) for item in value)


def count_example_containers(body: str) -> tuple[int, int, dict[str, int]]:
    """Count example containers, and the ones scoped to a framework.

    Returns the total count, the count of containers outside any
    ``only-for`` block, and a framework -> count mapping for the rest.
    """
    total = 0
    unscoped = 0
    scoped: dict[str, int] = {}
    # Each open container; only-for blocks carry their frameworks.
    stack: list[tuple[str, ...] | None] = []
    # Marker of the open code fence; only a bare run of the same character,
    # at least as long, closes it.
    fence: str | None = None

    for line in body.splitlines():
        fence_match = FENCE_PATTERN.match(line)
        if fence is not None:
            if (
                fence_match
                and fence_match.group(1)[0] == fence[0]
                and len(fence_match.group(1)) >= len(fence)
                and not fence_match.group(2).strip()
            ):
                fence = None
            continue
        if fence_match:
            fence = fence_match.group(1)
            continue

        if CONTAINER_CLOSE_PATTERN.match(line):
            if stack:
                stack.pop()
            continue

        match = CONTAINER_OPEN_PATTERN.match(line)
        if not match:
            continue

        name, args = match.group(1), match.group(2)
        if name == "only-for":
            stack.append(tuple(args.split()))
            continue

        if name == "example":
            total += 1
            frameworks = next((item for item in reversed(stack) if item), None)
            if frameworks is None:
                unscoped += 1
            for framework in frameworks or ():
                scoped[framework] = scoped.get(framework, 0) + 1

        stack.append(None)

    return total, unscoped, scoped


def derive_permalink(relative_path: Path) -> str:
    parts = list(relative_path.with_suffix("").parts)
    if parts and parts[-1] in ("index", "README"):
        parts = parts[:-1]
    return "/" + "/".join(parts)


def scan_file(path: Path, version_dir: Path) -> ScanResult | None:
    content = path.read_text(encoding="utf-8")
    try:
        front_matter, body = split_front_matter(content)
    except DocsCheckError as e:
        raise DocsCheckError(f"{path}: {e}") from e

    total, unscoped, scoped = count_example_containers(body)
    if total == 0:
        return None

    relative = path.relative_to(version_dir)
    return ScanResult(
        file_path=relative.as_posix(),
        permalink=str(front_matter.get("permalink") or derive_permalink(relative)),
        example_count=total,
        framework_counts=scoped,
        unscoped_count=unscoped,
        only_for=_as_frameworks(front_matter.get("onlyFor")),
    )


def find_example_containers_in_files(version: str, content_dir: Path) -> dict[str, ScanResult]:
    """Scan every markdown page of a docs version.

    Returns a mapping of source path to scan result, in path order, for the
    pages that declare at least one example container.
    """
    version_dir = content_dir / version
    if not version_dir.is_dir():
        raise DocsCheckError(f"Docs sources for version {version} not found in {version_dir}.")

    results: dict[str, ScanResult] = {}
    for path in sorted(version_dir.rglob("*.md")):
        result = scan_file(path, version_dir)
        if result is not None:
            results[result.file_path] = result
    return results
