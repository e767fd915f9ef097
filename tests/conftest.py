"""Shared fixtures for the docs example checks."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest


def evaluation(expected: int, received: int) -> dict[str, Any]:
    return {"result": expected == received, "expected": expected, "received": received}


class FakePage:
    """Stands in for a Playwright page.

    ``results`` maps a served path suffix to the evaluations returned on
    that page, in order. The last one repeats once the queue runs out. An
    exception in the queue is raised instead of returned.
    """

    def __init__(self, results: dict[str, list[Any]]) -> None:
        self._results = {path: list(items) for path, items in results.items()}
        self._current: str | None = None
        self.visited: list[str] = []
        self.waits: list[int] = []
        self.evaluations = 0

    def goto(self, url: str, **kwargs: Any) -> None:
        self.visited.append(url)
        self._current = next((path for path in self._results if url.endswith(path)), None)

    def evaluate(self, script: str) -> Any:
        self.evaluations += 1
        queue = self._results.get(self._current or "", [])
        if not queue:
            return evaluation(0, 0)
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    def wait_for_timeout(self, timeout: int) -> None:
        self.waits.append(timeout)


@pytest.fixture
def make_page():
    return FakePage


def write_page(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write_doc():
    return write_page


@pytest.fixture
def counts():
    """Build the evaluation payload a test case returns from the page."""
    return evaluation


@pytest.fixture
def docs_tree(tmp_path: Path) -> dict[str, Path]:
    """A content directory for version 13 with one example page, and a dist directory."""
    content_dir = tmp_path / "content"
    dist_dir = tmp_path / "dist"
    dist_dir.mkdir()

    write_page(
        content_dir,
        "13/guides/demo.md",
        "---\ntitle: Demo\npermalink: /demo\n---\n\n# Demo\n\n::: example #example1\n```js\nnew Handsontable(container, {});\n```\n:::\n",
    )
    return {"content_dir": content_dir, "dist_dir": dist_dir}
