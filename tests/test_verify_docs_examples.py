"""Tests for verification/verify_docs_examples.py: crawl, report and exit codes."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from verification import verify_docs_examples
from verification.page_checks import PageEvaluation, PageTestCase
from verification.permalinks import PermalinkEntry
from verification.verify_docs_examples import (
    CheckReport,
    OutcomeRecord,
    PageError,
    check_examples,
    classify,
    main,
    print_report,
)

BASE_URL = "http://localhost:8088/docs"
DEMO_PATH = "/13/javascript-data-grid/demo/"


class TestClassify:
    def test_pass(self) -> None:
        report = classify(CheckReport(), "/p/", PageEvaluation(result=True, expected=2, received=2))

        assert report == CheckReport(checked=1)

    def test_broken(self) -> None:
        report = classify(CheckReport(), "/p/", PageEvaluation(result=False, expected=2, received=1))

        assert report.broken == (OutcomeRecord("/p/", 2, 1),)
        assert report.suspicious == ()

    def test_suspicious(self) -> None:
        report = classify(CheckReport(), "/p/", PageEvaluation(result=True, expected=0, received=0))

        assert report.suspicious == (OutcomeRecord("/p/", 0, 0),)
        assert report.broken == ()

    def test_mismatch_with_zero_expected_is_broken(self) -> None:
        report = classify(CheckReport(), "/p/", PageEvaluation(result=False, expected=0, received=1))

        assert report.broken == (OutcomeRecord("/p/", 0, 1),)
        assert report.suspicious == ()

    def test_error_is_neither_broken_nor_suspicious(self, capsys) -> None:
        report = classify(CheckReport(), "/p/", PageEvaluation(result=False, error="boom"))

        assert report.broken == report.suspicious == ()
        assert report.errors == (PageError("/p/", "boom"),)
        assert report.exit_code == 0
        assert "/p/: boom" in capsys.readouterr().out

    def test_reports_are_not_mutated(self) -> None:
        empty = CheckReport()

        classify(empty, "/p/", PageEvaluation(result=False, expected=1, received=0))

        assert empty == CheckReport()


class TestCheckExamples:
    def test_visits_frameworks_pages_and_cases_in_order(self, make_page, counts) -> None:
        page = make_page({"/a/": [counts(1, 1)], "/b/": [counts(1, 1)]})
        cases = [PageTestCase("first", "1"), PageTestCase("second", "2")]
        permalinks = [PermalinkEntry("/a"), PermalinkEntry("/b", frozenset({"react"}))]

        report = check_examples(page, permalinks, ["javascript", "react"], "12.1", BASE_URL, test_cases=cases)

        assert page.visited == [
            f"{BASE_URL}/12.1/javascript-data-grid/a/",
            f"{BASE_URL}/12.1/react-data-grid/a/",
            f"{BASE_URL}/12.1/react-data-grid/b/",
        ]
        # Each visited page runs every test case once.
        assert page.evaluations == 6
        assert report.checked == 6
        assert report.exit_code == 0

    def test_retry_does_not_duplicate_entries(self, make_page, counts) -> None:
        page = make_page({"/a/": [counts(1, 0)]})

        report = check_examples(page, [PermalinkEntry("/a")], ["javascript"], "11.1", BASE_URL, check_tries=2)

        assert report.broken == (OutcomeRecord("/11.1/a/", 1, 0),)
        assert page.evaluations == 3
        assert page.waits == [300, 300]

    def test_navigation_failure_is_recorded_and_crawl_continues(self, counts) -> None:
        page = MagicMock()
        page.goto.side_effect = [PlaywrightError("net::ERR_CONNECTION_REFUSED"), None]
        page.evaluate.return_value = counts(1, 1)

        report = check_examples(page, [PermalinkEntry("/a"), PermalinkEntry("/b")], ["javascript"], "11.1", BASE_URL)

        assert report.errors == (PageError("/11.1/a/", "net::ERR_CONNECTION_REFUSED"),)
        assert report.checked == 1
        assert report.exit_code == 0

    def test_prints_section_headers_and_markers(self, make_page, counts, capsys) -> None:
        page = make_page({"/a/": [counts(1, 1)], "/b/": [counts(0, 0)], "/c/": [counts(2, 1)]})
        permalinks = [PermalinkEntry("/a"), PermalinkEntry("/b"), PermalinkEntry("/c")]

        check_examples(page, permalinks, ["javascript"], "11.1", BASE_URL, check_tries=0)

        out = capsys.readouterr().out
        assert "Javascript flavor:" in out
        assert "✓ /11.1/a/" in out
        assert "? /11.1/b/" in out
        assert "✗ /11.1/c/" in out


class TestPrintReport:
    def test_broken_takes_precedence(self, capsys) -> None:
        report = CheckReport(broken=(OutcomeRecord("/x/", 2, 1),), suspicious=(OutcomeRecord("/y/", 0, 0),))

        assert print_report(report, "13") == 1

        out = capsys.readouterr().out
        assert "Broken examples found in:" in out
        assert "/x/: Expected: 2, Received: 1." in out
        assert "/y/" not in out

    def test_suspicious(self, capsys) -> None:
        assert print_report(CheckReport(suspicious=(OutcomeRecord("/y/", 0, 0),)), "13") == 1

        out = capsys.readouterr().out
        assert "Expected 0 instances in:" in out
        assert "/y/" in out

    def test_errors_are_counted_per_page(self, capsys) -> None:
        report = CheckReport(
            errors=(PageError("/x/", "first case"), PageError("/x/", "second case"), PageError("/y/", "boom")),
            checked=1,
        )

        assert print_report(report, "13") == 0

        assert "Could not check 2 page(s)" in capsys.readouterr().out

    def test_success(self, capsys) -> None:
        assert print_report(CheckReport(checked=3), "13") == 0

        assert "Did not find any broken examples for version 13." in capsys.readouterr().out


@pytest.fixture
def browser_run(monkeypatch: pytest.MonkeyPatch, docs_tree: dict[str, Path]):
    """Run ``main`` against a fake browser; returns a runner taking the page."""
    serve = MagicMock(return_value=MagicMock())
    monkeypatch.setattr(verify_docs_examples, "serve_files", serve)
    monkeypatch.setattr(verify_docs_examples, "stop_serving", MagicMock())
    monkeypatch.setattr(verify_docs_examples.time, "sleep", MagicMock())
    # Version 13 is checked for the default framework only.
    monkeypatch.setattr(verify_docs_examples, "get_docs_frameworked_versions", lambda *_: ["next"])

    def runner(page, version: str = "13") -> int:
        playwright = MagicMock()
        browser = playwright.__enter__.return_value.chromium.launch.return_value
        browser.new_page.return_value = page
        monkeypatch.setattr(verify_docs_examples, "sync_playwright", MagicMock(return_value=playwright))

        code = main(
            [
                version,
                "--content-dir",
                str(docs_tree["content_dir"]),
                "--dist-dir",
                str(docs_tree["dist_dir"]),
            ]
        )
        runner.browser = browser
        return code

    runner.serve = serve
    return runner


class TestMain:
    @pytest.mark.parametrize("argv", [["abc"], ["12.1.0"], ["12.1.0-beta"], ["12.1.0+b"], []])
    def test_invalid_version_exits_before_serving(self, argv, browser_run, capsys) -> None:
        assert main(argv) == 1

        browser_run.serve.assert_not_called()
        assert "Invalid version number." in capsys.readouterr().out

    def test_all_instances_rendered(self, browser_run, make_page, counts, capsys) -> None:
        page = make_page({DEMO_PATH: [counts(2, 2)]})

        assert browser_run(page) == 0

        assert page.visited == [f"http://localhost:8088/docs{DEMO_PATH}"]
        browser_run.browser.close.assert_called_once()
        out = capsys.readouterr().out
        assert "Broken examples" not in out
        assert "Did not find any broken examples for version 13." in out

    def test_retry_recovers_transient_timing(self, browser_run, make_page, counts) -> None:
        page = make_page({DEMO_PATH: [counts(2, 1), counts(2, 2)]})

        assert browser_run(page) == 0
        assert page.waits == [300]

    def test_broken_example(self, browser_run, make_page, counts, capsys) -> None:
        page = make_page({DEMO_PATH: [counts(2, 1)]})

        assert browser_run(page) == 1

        assert page.evaluations == 3
        out = capsys.readouterr().out
        assert out.count(f"{DEMO_PATH}: Expected: 2, Received: 1.") == 1

    def test_zero_expected_is_suspicious(self, browser_run, make_page, counts, capsys) -> None:
        page = make_page({DEMO_PATH: [counts(0, 0)]})

        assert browser_run(page) == 1

        out = capsys.readouterr().out
        assert "Expected 0 instances in:" in out
        assert "Broken examples" not in out

    def test_next_is_a_valid_version(self, browser_run, make_page, docs_tree) -> None:
        (docs_tree["content_dir"] / "next").mkdir()

        assert browser_run(make_page({}), version="next") == 0

    def test_missing_version_sources(self, browser_run, make_page, capsys) -> None:
        assert browser_run(make_page({}), version="14.0") == 1

        browser_run.serve.assert_not_called()
        assert "not found" in capsys.readouterr().out

    def test_missing_build(self, browser_run, make_page, docs_tree, capsys) -> None:
        docs_tree["dist_dir"].rmdir()

        assert browser_run(make_page({})) == 1

        browser_run.serve.assert_not_called()
        assert "build the docs first" in capsys.readouterr().out
