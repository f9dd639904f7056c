"""Tests for the command line interface."""

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from concordia import __version__
from concordia import cli as cli_module
from concordia.cli import cli
from concordia.models.scan import ScanOutput
from concordia.storage import FindingStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger("concordia").handlers.clear()


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run commands from an empty directory with no user config."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def fixture(name):
    return str(FIXTURES_DIR / name)


def write_record(path, tool_name, rule_ids):
    record = {
        "tool_name": tool_name,
        "repository": "webapp",
        "repository_path": "/repos/webapp",
        "raw_output": {
            "results": [
                {"check_id": rule_id, "path": "/repos/webapp/index.js", "start": {"line": 15}}
                for rule_id in rule_ids
            ]
        },
    }
    path.write_text(json.dumps(record))
    return str(path)


class TestCli:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_adapters(self, runner):
        result = runner.invoke(cli, ["adapters"])

        assert result.exit_code == 0
        for name in ("semgrep", "snyk", "eslint", "sonarqube"):
            assert name in result.output


class TestNormalizeCommand:
    """Tests for `concordia normalize`."""

    def test_normalize_fixtures(self, runner, isolated):
        output = isolated / "canonical.json"
        result = runner.invoke(
            cli,
            [
                "normalize",
                fixture("semgrep_sample.json"),
                fixture("eslint_sample.json"),
                "--output",
                str(output),
                "--log-level",
                "error",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Semgrep: 3 findings" in result.output
        data = json.loads(output.read_text())
        assert [r["tool_name"] for r in data["results"]] == ["Semgrep", "ESLint-Security"]
        assert data["results"][0]["findings"][0]["location"]["path"] == "src/index.js"

    def test_normalize_raw_report_with_store(self, runner, isolated):
        with open(FIXTURES_DIR / "semgrep_sample.json") as f:
            raw = json.load(f)["raw_output"]
        raw_path = isolated / "semgrep-raw.json"
        raw_path.write_text(json.dumps(raw))
        store_path = isolated / "store"

        result = runner.invoke(
            cli,
            [
                "normalize",
                str(raw_path),
                "--tool",
                "semgrep",
                "--repo-root",
                "/repos/webapp",
                "--store",
                "--store-path",
                str(store_path),
                "--log-level",
                "error",
            ],
        )

        assert result.exit_code == 0, result.output
        stored = FindingStore(store_path).fetch_by_repository("webapp")
        assert len(stored["semgrep"]) == 3
        assert stored["semgrep"][0].location.path.startswith("src/")

    def test_normalize_all_failed(self, runner, isolated):
        bad = isolated / "bad.json"
        bad.write_text(json.dumps({"tool_name": "Semgrep", "success": False, "error": "crashed"}))

        result = runner.invoke(cli, ["normalize", str(bad), "--log-level", "error"])

        assert result.exit_code == 1
        assert "crashed" in result.output


class TestCompareCommand:
    """Tests for `concordia compare`."""

    def test_compare_json(self, runner, isolated):
        a = write_record(isolated / "a.json", "Semgrep", ["xss-1"])
        b = write_record(isolated / "b.json", "semgrep-pro", ["xss-1", "sqli-2"])
        output = isolated / "report.json"

        result = runner.invoke(
            cli,
            ["compare", a, b, "--format", "json", "--output", str(output), "--details",
             "--log-level", "error"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["tools"] == ["Semgrep", "semgrep-pro"]
        assert data["overlap"]["common_findings"] == 1
        assert data["effectiveness"]["semgrep-pro"]["uniqueness_rate"] == 50.0
        assert len(data["detailed_unique"]) == 1

    def test_compare_console(self, runner, isolated):
        result = runner.invoke(
            cli,
            [
                "compare",
                fixture("semgrep_sample.json"),
                fixture("snyk_sarif_sample.json"),
                fixture("sonarqube_sample.json"),
                "--log-level",
                "error",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Tool Effectiveness" in result.output
        assert "Snyk Code" in result.output

    def test_compare_list_file_with_failure(self, runner, isolated):
        records = isolated / "batch.json"
        with open(FIXTURES_DIR / "eslint_sample.json") as f:
            eslint = json.load(f)
        records.write_text(
            json.dumps([eslint, {"tool_name": "Snyk Code", "success": False, "error": "timeout"}])
        )
        output = isolated / "report.json"

        result = runner.invoke(
            cli,
            ["compare", str(records), "-f", "json", "-o", str(output), "--log-level", "error"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["failed_tools"] == {"Snyk Code": "timeout"}
        assert "detailed_overlap" not in data

    def test_compare_uses_config_rules(self, runner, isolated):
        (isolated / "concordia.yaml").write_text(
            "classifier:\n  rules:\n    - pattern: xss\n      category: CSRF\n"
        )
        a = write_record(isolated / "a.json", "Semgrep", ["xss-1"])
        output = isolated / "report.json"

        result = runner.invoke(
            cli, ["compare", a, "-f", "json", "-o", str(output), "--log-level", "error"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["by_category"]["Semgrep"]["CSRF"] == 1


class TestReportCommand:
    """Tests for `concordia report`."""

    def test_report_from_store(self, runner, isolated):
        store_path = isolated / "store"
        a = write_record(isolated / "a.json", "Semgrep", ["xss-1"])
        b = write_record(isolated / "b.json", "semgrep-pro", ["xss-1", "sqli-2"])
        runner.invoke(
            cli, ["normalize", a, b, "--store", "--store-path", str(store_path), "--log-level", "error"]
        )
        output = isolated / "report.json"

        result = runner.invoke(
            cli,
            ["report", "webapp", "--store-path", str(store_path), "-f", "json", "-o", str(output),
             "--log-level", "error"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["repository"] == "webapp"
        assert data["overlap"]["total_unique_issues"] == 2

    def test_report_unknown_repository(self, runner, isolated):
        result = runner.invoke(
            cli, ["report", "missing", "--store-path", str(isolated / "store"), "--log-level", "error"]
        )

        assert result.exit_code == 1
        assert "No stored findings for missing" in result.output


class TestScanCommand:
    """Tests for `concordia scan` with the scanners stubbed out."""

    def test_scan_stores_and_reports(self, runner, isolated, monkeypatch):
        repo = isolated / "webapp"
        repo.mkdir()
        store_path = isolated / "store"

        def fake_scan_repositories(scanners, repository_paths, max_workers=4):
            assert [s.tool_name for s in scanners] == ["Semgrep"]
            assert max_workers == 2
            with open(FIXTURES_DIR / "semgrep_sample.json") as f:
                record = json.load(f)
            record["repository_path"] = str(repo)
            return [ScanOutput.model_validate(record)]

        monkeypatch.setattr(cli_module, "scan_repositories", fake_scan_repositories)

        result = runner.invoke(
            cli,
            [
                "scan",
                str(repo),
                "--tool",
                "semgrep",
                "--max-workers",
                "2",
                "--store-path",
                str(store_path),
                "--log-level",
                "error",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Tool Effectiveness" in result.output
        stored = FindingStore(store_path).fetch_by_repository("webapp")
        assert len(stored["Semgrep"]) == 3
