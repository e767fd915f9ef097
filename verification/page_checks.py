from __future__ import annotations

from dataclasses import dataclass

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from .docs_config import CHECK_TRIES, EXAMPLE_INIT_TIMEOUT


@dataclass(frozen=True)
class PageEvaluation:
    result: bool
    expected: int = 0
    received: int = 0
    error: str | None = None

    @classmethod
    def from_dict(cls, data) -> PageEvaluation:
        if not isinstance(data, dict):
            return cls(result=False, error=f"Unexpected evaluation result: {data!r}")

        error = data.get("error")
        expected = int(data.get("expected") or 0)
        received = int(data.get("received") or 0)
        return cls(
            result=bool(data.get("result")) and error is None,
            expected=expected,
            received=received,
            error=str(error) if error is not None else None,
        )


@dataclass(frozen=True)
class PageTestCase:
    name: str
    script: str


# Counted inside rendered example containers only.
# Expected: grid initializations in the containers' code samples.
# Received: grid instances rendered in the containers, editors' inner grids excluded.
INSTANCE_COUNT_SCRIPT = """
() => {
  try {
    const initPattern = /new\\s+Handsontable(?:\\.\\w+)*\\s*\\(|<HotTable\\b/g;
    const containers = document.querySelectorAll('.example-container');
    let expected = 0;
    let received = 0;

    containers.forEach((container) => {
      container.querySelectorAll('div[class*="language-"] pre code').forEach((code) => {
        const matches = code.textContent.match(initPattern);

        expected += matches ? matches.length : 0;
      });

      received += Array.from(container.querySelectorAll('.handsontable .ht_master'))
        .filter(master => !master.closest('.handsontableEditor'))
        .length;
    });

    return {
      result: received === expected,
      expected,
      received,
    };

  } catch (e) {
    return {
      result: false,
      expected: 0,
      received: 0,
      error: String(e && e.stack ? e.stack : e),
    };
  }
}
"""

TEST_CASES = [
    PageTestCase(name="instance-count", script=INSTANCE_COUNT_SCRIPT),
]


def verify(page: Page, test_case: PageTestCase) -> PageEvaluation:
    try:
        data = page.evaluate(test_case.script)
    except PlaywrightError as e:
        return PageEvaluation(result=False, error=f"{test_case.name}: {e.message}")

    return PageEvaluation.from_dict(data)


def verify_with_retry(
    page: Page,
    test_case: PageTestCase,
    max_tries: int = CHECK_TRIES,
    delay: int = EXAMPLE_INIT_TIMEOUT,
) -> PageEvaluation:
    """Evaluate a test case, retrying while the counts differ.

    Some grids initialize after the page load, so a mismatch is re-checked
    ``max_tries`` more times, ``delay`` milliseconds apart. An evaluation
    error is returned right away.
    """
    evaluation = verify(page, test_case)
    tries = 0

    while not evaluation.result and evaluation.error is None and tries < max_tries:
        tries += 1
        page.wait_for_timeout(delay)
        evaluation = verify(page, test_case)

    return evaluation
