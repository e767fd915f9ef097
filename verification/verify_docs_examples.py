"""Check that the docs examples render every grid their code initializes.

For each page with example containers, the number of rendered grid
instances is compared with the number of initializations in the page's
code samples. The docs version being checked needs to be built first.

Usage:
    python -m verification 13.0
    python -m verification next --headed
"""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import dataclass, replace
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, sync_playwright

from .docs_config import (
    CHECK_TRIES,
    DEFAULT_CONTENT_DIR,
    DEFAULT_DIST_DIR,
    DEFAULT_FRAMEWORK,
    EXAMPLE_INIT_TIMEOUT,
    PORT,
    CheckConfig,
    DocsCheckError,
    InvalidVersionError,
    validate_version,
)
from .docs_console import console
from .docs_server import serve_files, stop_serving
from .docs_versions import get_docs_frameworked_versions, get_frameworks
from .examples_scanner import find_example_containers_in_files
from .page_checks import TEST_CASES, PageEvaluation, PageTestCase, verify_with_retry
from .permalinks import PermalinkEntry, extend_permalink, fetch_paths_with_conditions, fetch_permalinks


@dataclass(frozen=True)
class OutcomeRecord:
    path: str
    expected: int
    received: int


@dataclass(frozen=True)
class PageError:
    path: str
    message: str


@dataclass(frozen=True)
class CheckReport:
    """Outcome of a crawl. Every ``with_*`` call returns a new report."""

    broken: tuple[OutcomeRecord, ...] = ()
    suspicious: tuple[OutcomeRecord, ...] = ()
    errors: tuple[PageError, ...] = ()
    checked: int = 0

    def with_passed(self) -> CheckReport:
        return replace(self, checked=self.checked + 1)

    def with_broken(self, record: OutcomeRecord) -> CheckReport:
        return replace(self, broken=self.broken + (record,), checked=self.checked + 1)

    def with_suspicious(self, record: OutcomeRecord) -> CheckReport:
        return replace(self, suspicious=self.suspicious + (record,), checked=self.checked + 1)

    def with_error(self, error: PageError) -> CheckReport:
        return replace(self, errors=self.errors + (error,))

    @property
    def exit_code(self) -> int:
        return 1 if self.broken or self.suspicious else 0


def classify(report: CheckReport, path: str, evaluation: PageEvaluation) -> CheckReport:
    if evaluation.error is not None:
        console.error(f"{path}: {evaluation.error}")
        return report.with_error(PageError(path=path, message=evaluation.error))

    # A page expected to render no instances at all is likely miscounted.
    suspicious = evaluation.expected == 0
    console.check(path, evaluation.result, suspicious)

    record = OutcomeRecord(path=path, expected=evaluation.expected, received=evaluation.received)
    if not evaluation.result:
        return report.with_broken(record)
    if suspicious:
        return report.with_suspicious(record)
    return report.with_passed()


def check_examples(
    page: Page,
    permalinks: list[PermalinkEntry],
    frameworks: list[str],
    version: str,
    base_url: str,
    test_cases: list[PageTestCase] = TEST_CASES,
    check_tries: int = CHECK_TRIES,
    example_init_timeout: int = EXAMPLE_INIT_TIMEOUT,
) -> CheckReport:
    """Run every test case on every page, one framework flavor at a time."""
    report = CheckReport()

    console.info("Checking if the examples got rendered correctly:")

    for framework in frameworks:
        console.section(framework)

        for entry in permalinks:
            if not entry.applies_to(framework):
                continue

            permalink = extend_permalink(entry.path, framework, version)

            try:
                page.goto(f"{base_url}{permalink}")
            except PlaywrightError as e:
                console.error(f"{permalink}: {e.message}")
                report = report.with_error(PageError(path=permalink, message=e.message))
                continue

            for test_case in test_cases:
                evaluation = verify_with_retry(page, test_case, check_tries, example_init_timeout)
                report = classify(report, permalink, evaluation)

    return report


def print_report(report: CheckReport, version: str) -> int:
    if report.errors:
        pages = len({error.path for error in report.errors})
        console.warning(f"\nCould not check {pages} page(s), see the errors above.")

    if report.broken:
        entries = "\n".join(
            f"{entry.path}: Expected: {entry.expected}, Received: {entry.received}."
            for entry in report.broken
        )
        console.error(f"\nBroken examples found in: \n\n{entries}")
        return 1

    if report.suspicious:
        entries = "\n".join(f"{entry.path}\n" for entry in report.suspicious)
        console.warning(f"\nExpected 0 instances in: \n\n{entries}")
        return 1

    console.success(f"\nDid not find any broken examples for version {version}.")
    return 0


def frameworks_to_check(config: CheckConfig) -> list[str]:
    if config.version in get_docs_frameworked_versions("development", config.content_dir):
        return get_frameworks()
    return [DEFAULT_FRAMEWORK]


def run(config: CheckConfig) -> int:
    frameworks = frameworks_to_check(config)

    search_results = find_example_containers_in_files(config.version, config.content_dir)
    paths_with_conditions = fetch_paths_with_conditions(config.version, config.content_dir)
    permalinks = fetch_permalinks(search_results, config.version, paths_with_conditions)

    if not config.dist_dir.is_dir():
        raise DocsCheckError(f"Built docs not found in {config.dist_dir}, build the docs first.")

    server = serve_files(config.port, config.dist_dir)
    try:
        # Wait for the http server to serve the files.
        time.sleep(config.file_serve_timeout / 1000)

        with sync_playwright() as p:
            browser = p.chromium.launch(headless=config.headless)
            page = browser.new_page()
            try:
                report = check_examples(
                    page,
                    permalinks,
                    frameworks,
                    config.version,
                    config.base_url,
                    check_tries=config.check_tries,
                    example_init_timeout=config.example_init_timeout,
                )
            finally:
                browser.close()
    finally:
        stop_serving(server)

    return print_report(report, config.version)


def main(args: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="check-docs-examples",
        description="Check that every docs example renders the grids its code initializes",
    )
    parser.add_argument("version", nargs="?", help='Docs version to check, e.g. "13.0" or "next"')
    parser.add_argument(
        "--content-dir",
        type=Path,
        default=DEFAULT_CONTENT_DIR,
        help=f"Markdown sources, one directory per version (default: {DEFAULT_CONTENT_DIR})",
    )
    parser.add_argument(
        "--dist-dir",
        type=Path,
        default=DEFAULT_DIST_DIR,
        help=f"Built docs served under /docs (default: {DEFAULT_DIST_DIR})",
    )
    parser.add_argument("--port", type=int, default=PORT, help=f"Port to serve the docs on (default: {PORT})")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")

    parsed = parser.parse_args(args)

    try:
        version = validate_version(parsed.version)
    except InvalidVersionError:
        console.error("Invalid version number.")
        return 1

    config = CheckConfig(
        version=version,
        content_dir=parsed.content_dir,
        dist_dir=parsed.dist_dir,
        port=parsed.port,
        headless=not parsed.headed,
    )

    try:
        return run(config)
    except DocsCheckError as e:
        console.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
