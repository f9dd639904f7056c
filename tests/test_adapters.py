"""Tests for tool adapters."""

import json
from pathlib import Path

import pytest

from concordia.adapters import register_default_adapters
from concordia.adapters.base import AdapterRegistry, as_int, rebase_path
from concordia.adapters.eslint import ESLintAdapter
from concordia.adapters.semgrep import SemgrepAdapter
from concordia.adapters.snyk import SnykAdapter
from concordia.adapters.sonarqube import SonarQubeAdapter
from concordia.models.enums import Category, Confidence, Severity, ToolKind
from concordia.models.scan import ScanOutput
from concordia.taxonomy.category import CategoryRule

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    with open(FIXTURES_DIR / name) as f:
        return json.load(f)


class TestRebasePath:
    """Tests for path rebasing onto the repository root."""

    def test_absolute_path_under_root(self):
        """Absolute paths under the root become relative."""
        assert rebase_path("/repos/webapp/src/index.js", "/repos/webapp") == "src/index.js"

    def test_root_with_trailing_slash(self):
        """A trailing slash on the root is ignored."""
        assert rebase_path("/repos/webapp/src/index.js", "/repos/webapp/") == "src/index.js"

    def test_relative_path_unchanged(self):
        """Already-relative paths pass through."""
        assert rebase_path("src/index.js", "/repos/webapp") == "src/index.js"

    def test_dot_prefix_stripped(self):
        """A leading './' is removed."""
        assert rebase_path("./src/index.js", "/repos/webapp") == "src/index.js"

    def test_file_uri(self):
        """file:// URIs are decoded and rebased."""
        assert rebase_path("file:///repos/webapp/src/my%20file.js", "/repos/webapp") == (
            "src/my file.js"
        )

    def test_windows_separators(self):
        """Backslashes become forward slashes."""
        assert rebase_path("C:\\repos\\webapp\\src\\index.js", "C:\\repos\\webapp") == "src/index.js"

    def test_sibling_directory_not_stripped(self):
        """A sibling directory sharing the root's prefix is left alone."""
        assert rebase_path("/repos/webapp2/src/index.js", "/repos/webapp") == (
            "/repos/webapp2/src/index.js"
        )

    def test_missing_path(self):
        """Missing paths become the empty string."""
        assert rebase_path(None, "/repos/webapp") == ""
        assert rebase_path("", "/repos/webapp") == ""

    def test_no_root(self):
        """Without a root the path is only normalized."""
        assert rebase_path("/abs/src/index.js", "") == "/abs/src/index.js"

    def test_relative_root_normalized(self):
        """A ./-prefixed or trailing-slash relative root strips like its plain form."""
        for root in ("./repo", "repo/", "repo"):
            assert rebase_path("repo/src/app.js", root) == "src/app.js"
            assert rebase_path("./repo/src/app.js", root) == "src/app.js"

    def test_dot_root_leaves_path(self):
        """A root of '.' leaves relative paths alone."""
        assert rebase_path("src/app.js", ".") == "src/app.js"

    def test_tools_agree_on_path(self):
        """Absolute, relative and URI forms of one file rebase identically."""
        root = "/repos/webapp"
        forms = ["/repos/webapp/src/index.js", "src/index.js", "./src/index.js",
                 "file:///repos/webapp/src/index.js"]
        assert {rebase_path(form, root) for form in forms} == {"src/index.js"}


class TestAsInt:
    def test_values(self):
        """Junk, booleans and non-positive numbers become None."""
        assert as_int(15) == 15
        assert as_int("15") == 15
        assert as_int(0) is None
        assert as_int(None) is None
        assert as_int("abc") is None
        assert as_int(True) is None


class TestSemgrepAdapter:
    """Tests for Semgrep JSON adapter."""

    @pytest.fixture
    def adapter(self):
        return SemgrepAdapter()

    @pytest.fixture
    def result(self, adapter):
        return adapter.adapt(load_fixture("semgrep_sample.json"))

    def test_tool_kind(self, adapter):
        """Adapter handles Semgrep."""
        assert adapter.tool_kind == ToolKind.SEMGREP
        assert adapter.tool_name == "semgrep"

    def test_adapt_succeeds(self, result):
        """Fixture adapts successfully with the record's provenance."""
        assert result.success is True
        assert result.error is None
        assert result.tool_name == "Semgrep"
        assert result.repository == "webapp"

    def test_malformed_item_skipped(self, result):
        """The malformed string item is skipped, not fatal."""
        assert len(result.findings) == 3

    def test_xss_finding(self, result):
        """XSS result maps severity, category, location and metadata."""
        xss = next(f for f in result.findings if "xss" in f.rule_id)

        assert xss.severity == Severity.CRITICAL
        assert xss.category == Category.XSS
        assert xss.location.path == "src/index.js"
        assert xss.location.start_line == 15
        assert xss.location.end_line == 15
        assert xss.location.start_column == 5
        assert xss.location.end_column == 40
        assert xss.tool_name == "Semgrep"
        assert xss.metadata["confidence"] == Confidence.MEDIUM.value
        assert xss.metadata["cwe"][0].startswith("CWE-79")
        assert xss.metadata["owasp"] == ["A03:2021 - Injection"]
        assert "res.send" in xss.metadata["code_snippet"]

    def test_sql_finding(self, result):
        """SQL injection result is classified from its rule id."""
        sql = next(f for f in result.findings if f.location.path == "src/db.js")

        assert sql.severity == Severity.HIGH
        assert sql.category == Category.SQL_INJECTION
        assert sql.location.start_line == 40
        assert sql.location.end_line == 42
        # Scalar CWE is wrapped in a list
        assert len(sql.metadata["cwe"]) == 1
        assert sql.metadata["confidence"] == Confidence.HIGH.value

    def test_info_finding(self, result):
        """Path traversal result maps to medium with no CWE."""
        traversal = next(f for f in result.findings if f.location.path == "src/files.js")

        assert traversal.severity == Severity.MEDIUM
        assert traversal.category == Category.PATH_TRAVERSAL
        assert traversal.metadata["confidence"] == Confidence.MEDIUM.value
        assert traversal.metadata["cwe"] == []

    def test_missing_fields_default(self, adapter):
        """Missing optional fields fall back to defaults."""
        result = adapter.adapt(
            {"tool_name": "Semgrep", "raw_output": {"results": [{"check_id": "some-rule"}]}}
        )

        assert result.success is True
        finding = result.findings[0]
        assert finding.location.path == ""
        assert finding.location.start_line is None
        assert finding.severity == Severity.MEDIUM
        assert finding.category == Category.OTHER
        assert finding.message == "Security issue detected"
        assert finding.metadata["confidence"] == Confidence.MEDIUM.value

    def test_json_string_payload(self, adapter):
        """A JSON text payload is decoded first."""
        raw = json.dumps({"results": [{"check_id": "xss-1", "path": "a.js", "start": {"line": 1}}]})
        result = adapter.adapt(ScanOutput(tool_name="semgrep", raw_output=raw))

        assert result.success is True
        assert result.findings[0].location.start_line == 1

    def test_empty_results(self, adapter):
        """An empty results list succeeds with no findings."""
        result = adapter.adapt({"tool_name": "semgrep", "raw_output": {"results": []}})
        assert result.success is True
        assert result.findings == []

    def test_invalid_json_fails(self, adapter):
        """Invalid JSON text yields a failed result."""
        result = adapter.adapt({"tool_name": "semgrep", "raw_output": "{not json"})

        assert result.success is False
        assert "Invalid JSON" in result.error
        assert result.findings == []

    def test_wrong_shape_fails(self, adapter):
        """A non-object payload yields a failed result."""
        result = adapter.adapt({"tool_name": "semgrep", "raw_output": [1, 2, 3]})
        assert result.success is False
        assert result.findings == []

    def test_all_items_malformed_fails(self, adapter):
        """All items failing is treated as a schema change."""
        result = adapter.adapt({"tool_name": "semgrep", "raw_output": {"results": ["a", "b"]}})

        assert result.success is False
        assert "All 2 items failed" in result.error

    def test_failed_scan_passed_through(self, adapter):
        """A failed scan record stays failed with its error."""
        result = adapter.adapt(
            {
                "tool_name": "Semgrep",
                "repository": "webapp",
                "success": False,
                "error": "semgrep: command not found",
            }
        )

        assert result.success is False
        assert result.error == "semgrep: command not found"
        assert result.repository == "webapp"

    def test_custom_category_rules(self, adapter):
        """Configured category rules override the defaults."""
        rules = (CategoryRule(pattern="sequelize", category=Category.SQL_INJECTION),)
        result = adapter.adapt(load_fixture("semgrep_sample.json"), category_rules=rules)

        categories = {f.location.path: f.category for f in result.findings}
        assert categories["src/db.js"] == Category.SQL_INJECTION
        assert categories["src/index.js"] == Category.OTHER

    def test_stats(self, result):
        """Stats count findings by severity."""
        assert result.stats["total_findings"] == 3
        assert result.stats["by_severity"] == {"critical": 1, "high": 1, "medium": 1, "low": 0}


class TestSnykAdapter:
    """Tests for Snyk Code SARIF adapter."""

    @pytest.fixture
    def adapter(self):
        return SnykAdapter()

    @pytest.fixture
    def result(self, adapter):
        return adapter.adapt(load_fixture("snyk_sarif_sample.json"))

    def test_adapt_succeeds(self, result):
        """SARIF fixture adapts with three findings."""
        assert result.success is True
        assert result.tool_name == "Snyk Code"
        assert len(result.findings) == 3

    def test_xss_finding(self, result):
        """Rule metadata supplies CWE and category."""
        xss = next(f for f in result.findings if f.rule_id == "javascript/XSS")

        assert xss.severity == Severity.HIGH
        assert xss.category == Category.XSS
        assert xss.location.path == "src/index.js"
        assert xss.location.start_line == 15
        assert xss.metadata["confidence"] == Confidence.HIGH.value
        assert xss.metadata["rule_description"] == "Cross-site Scripting (XSS)"
        assert xss.metadata["cwe"] == ["CWE-79"]
        assert xss.metadata["priority_score"] == 803

    def test_file_uri_rebased(self, result):
        """Artifact URIs are rebased onto the repository root."""
        secret = next(f for f in result.findings if "Secret" in f.rule_id)

        assert secret.location.path == "config/settings.js"
        assert secret.severity == Severity.LOW
        assert secret.category == Category.HARDCODED_CREDENTIALS
        # End line falls back to the start line
        assert secret.location.end_line == 3
        assert secret.metadata["cwe"] == ["CWE-547"]

    def test_missing_location_and_level(self, result):
        """Results without location or level still adapt."""
        finding = next(f for f in result.findings if "RateLimiting" in f.rule_id)

        assert finding.location.path == ""
        assert finding.location.start_line is None
        assert finding.severity == Severity.MEDIUM
        assert finding.category == Category.OTHER

    def test_multiple_runs(self, adapter):
        """Results from every run are collected."""
        run = {"results": [{"ruleId": "javascript/Sqli", "level": "error"}]}
        result = adapter.adapt({"tool_name": "snyk", "raw_output": {"runs": [run, run]}})

        assert result.success is True
        assert len(result.findings) == 2

    def test_no_runs(self, adapter):
        """A SARIF log with no runs has no findings."""
        result = adapter.adapt({"tool_name": "snyk", "raw_output": {"runs": []}})
        assert result.success is True
        assert result.findings == []

    def test_invalid_runs_fails(self, adapter):
        """Non-list runs yield a failed result."""
        result = adapter.adapt({"tool_name": "snyk", "raw_output": {"runs": "nope"}})
        assert result.success is False


class TestESLintAdapter:
    """Tests for ESLint JSON adapter."""

    @pytest.fixture
    def adapter(self):
        return ESLintAdapter()

    @pytest.fixture
    def result(self, adapter):
        return adapter.adapt(load_fixture("eslint_sample.json"))

    def test_ruleless_messages_ignored(self, result):
        """Messages without a ruleId are dropped."""
        assert result.success is True
        assert len(result.findings) == 3
        assert all(f.rule_id for f in result.findings)

    def test_child_process(self, result):
        """Child-process rule maps to command injection."""
        finding = next(f for f in result.findings if f.rule_id == "security/detect-child-process")

        assert finding.severity == Severity.MEDIUM
        assert finding.category == Category.COMMAND_INJECTION
        assert finding.location.path == "src/index.js"
        assert finding.location.start_line == 2
        assert finding.location.end_column == 37
        assert finding.metadata["rule_description"] == "Child process execution detected"

    def test_dangerous_rule_escalated(self, result):
        """Dangerous rules are always high severity."""
        finding = next(f for f in result.findings if f.rule_id == "security/detect-unsafe-regex")

        assert finding.severity == Severity.HIGH
        assert finding.category == Category.REDOS
        assert finding.location.end_line == 30
        assert finding.location.end_column == 15

    def test_fix_flag(self, result):
        """Messages with a fix are flagged in metadata."""
        finding = next(f for f in result.findings if f.rule_id == "no-unsanitized/property")

        assert finding.location.path == "src/render.js"
        assert finding.category == Category.XSS
        assert finding.metadata["fix"] == "available"
        assert finding.metadata["confidence"] == Confidence.HIGH.value

    def test_unknown_rule_uses_keywords(self, adapter):
        """Unmapped rules fall back to keyword classification."""
        raw = [{"filePath": "a.js", "messages": [{"ruleId": "custom/no-sql-concat", "severity": 2}]}]
        result = adapter.adapt({"tool_name": "eslint", "raw_output": raw})

        assert result.findings[0].category == Category.SQL_INJECTION
        assert result.findings[0].metadata["rule_description"] == "custom/no-sql-concat"

    def test_object_payload_fails(self, adapter):
        """A non-list payload yields a failed result."""
        result = adapter.adapt({"tool_name": "eslint", "raw_output": {"results": []}})
        assert result.success is False


class TestSonarQubeAdapter:
    """Tests for SonarQube issue adapter."""

    @pytest.fixture
    def adapter(self):
        return SonarQubeAdapter()

    @pytest.fixture
    def result(self, adapter):
        return adapter.adapt(load_fixture("sonarqube_sample.json"))

    def test_adapt_succeeds(self, result):
        """Issue fixture adapts with three findings."""
        assert result.success is True
        assert len(result.findings) == 3

    def test_command_injection(self, result):
        """Component key gives the path and the rule gives the category."""
        finding = next(f for f in result.findings if f.rule_id == "javascript:S2076")

        assert finding.severity == Severity.CRITICAL
        assert finding.category == Category.COMMAND_INJECTION
        assert finding.location.path == "src/exec.js"
        assert finding.location.start_line == 12
        assert finding.metadata["confidence"] == Confidence.HIGH.value
        assert finding.metadata["effort"] == "30min"

    def test_hotspot_confidence(self, result):
        """Issue keeps medium confidence and its status."""
        finding = next(f for f in result.findings if f.rule_id == "javascript:S5332")

        assert finding.severity == Severity.MEDIUM
        assert finding.metadata["confidence"] == Confidence.MEDIUM.value
        assert finding.metadata["status"] == "OPEN"

    def test_missing_severity_and_line(self, result):
        """Missing severity falls back to medium; the text range gives the lines."""
        finding = next(f for f in result.findings if f.rule_id == "javascript:S4790")

        assert finding.severity == Severity.MEDIUM
        assert finding.location.start_line == 5
        assert finding.location.end_line == 6


class TestAdapterRegistry:
    """Tests for adapter registry."""

    def setup_method(self):
        AdapterRegistry.clear()
        register_default_adapters()

    def teardown_method(self):
        register_default_adapters()

    def test_all_tools_registered(self):
        """Every supported tool has an adapter."""
        kinds = {adapter.tool_kind for adapter in AdapterRegistry.get_all_adapters()}
        assert kinds == set(ToolKind)

    def test_register_is_idempotent(self):
        """Registering a kind twice keeps the first adapter."""
        register_default_adapters()
        assert len(AdapterRegistry.get_all_adapters()) == len(ToolKind)

    @pytest.mark.parametrize(
        "name,adapter_cls",
        [
            ("Semgrep", SemgrepAdapter),
            ("Snyk Code", SnykAdapter),
            ("ESLint-Security", ESLintAdapter),
            ("SonarQube", SonarQubeAdapter),
            ("sonarcloud", SonarQubeAdapter),
        ],
    )
    def test_get_by_display_name(self, name, adapter_cls):
        """Display names resolve to their adapter."""
        assert isinstance(AdapterRegistry.get(name), adapter_cls)

    def test_get_unknown(self):
        """Unknown tools resolve to None."""
        assert AdapterRegistry.get("bandit") is None
        assert AdapterRegistry.get(None) is None

    def test_adapt_all_isolates_failures(self):
        """One broken payload does not affect the other tools."""
        results = AdapterRegistry.adapt_all(
            [
                load_fixture("semgrep_sample.json"),
                {"tool_name": "Snyk Code", "raw_output": "<<garbage>>"},
                {"tool_name": "bandit", "raw_output": {}},
                load_fixture("eslint_sample.json"),
            ]
        )

        assert [r.success for r in results] == [True, False, False, True]
        assert results[2].tool_name == "bandit"
        assert "No adapter registered" in results[2].error
        assert len(results[0].findings) == 3
        assert len(results[3].findings) == 3

    def test_clear(self):
        """clear() empties the registry."""
        AdapterRegistry.clear()
        assert AdapterRegistry.get_all_adapters() == []
