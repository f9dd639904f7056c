"""ESLint security scanner."""

from pathlib import Path
from typing import Any

from concordia.models.enums import ToolKind
from concordia.scanners.base import DEFAULT_EXCLUDES, BaseScanner, ScanError, run_cmd

SECURITY_RULE_PREFIXES = ("security/", "no-unsanitized/")


class ESLintScanner(BaseScanner):
    """
    Runs ESLint with eslint-plugin-security and eslint-plugin-no-unsanitized.

    Only messages from those plugins are kept in the raw output.
    """

    def __init__(self, config_path: str | None = None, timeout: int = 900):
        super().__init__(timeout=timeout)
        self.config_path = config_path

    @property
    def tool_kind(self) -> ToolKind:
        return ToolKind.ESLINT

    @property
    def tool_name(self) -> str:
        return "ESLint-Security"

    @property
    def version_command(self) -> list[str]:
        return ["npx", "--no-install", "eslint", "--version"]

    def _run(self, repository_path: Path) -> Any:
        cmd = ["npx", "--no-install", "eslint", "--format", "json", "--no-error-on-unmatched-pattern"]
        if self.config_path:
            cmd.extend(["--config", self.config_path])
        for exclude in DEFAULT_EXCLUDES:
            cmd.extend(["--ignore-pattern", f"**/{exclude}/**"])
        # Lint the working directory; ESLint still reports absolute filePaths
        cmd.append(".")

        code, stdout, stderr = run_cmd(cmd, cwd=str(repository_path), timeout=self.timeout)

        # 1 = lint problems found, 2 = configuration or internal error
        if code > 1:
            raise ScanError(
                f"eslint failed (exit={code}). stderr:\n{(stderr or '').strip()[:4000]}",
                self.tool_name,
            )
        results = self._decode_stdout(stdout, code, stderr)
        if not isinstance(results, list):
            raise ScanError("unexpected ESLint output shape", self.tool_name)
        return self._security_only(results)

    def _security_only(self, results: list[dict]) -> list[dict]:
        """Drop non-security messages and files left with none."""
        filtered = []
        for result in results:
            messages = [
                m
                for m in result.get("messages", [])
                if (m.get("ruleId") or "").startswith(SECURITY_RULE_PREFIXES)
            ]
            if messages:
                filtered.append({**result, "messages": messages})
        return filtered
