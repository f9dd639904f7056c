"""Snyk Code scanner."""

from pathlib import Path
from typing import Any

from concordia.models.enums import ToolKind
from concordia.scanners.base import BaseScanner, ScanError, run_cmd


class SnykScanner(BaseScanner):
    """Runs ``snyk code test --json``, which prints SARIF."""

    @property
    def tool_kind(self) -> ToolKind:
        return ToolKind.SNYK

    @property
    def tool_name(self) -> str:
        return "Snyk Code"

    @property
    def version_command(self) -> list[str]:
        return ["snyk", "version"]

    def _run(self, repository_path: Path) -> Any:
        cmd = ["snyk", "code", "test", str(repository_path), "--json"]
        code, stdout, stderr = run_cmd(cmd, timeout=self.timeout)

        if "Not authenticated" in (stderr or "") or "Not authenticated" in (stdout or ""):
            raise ScanError("Snyk not authenticated. Run: snyk auth", self.tool_name)
        # 0 = clean, 1 = issues found, 2+ = failure
        if code > 1:
            raise ScanError(
                f"snyk failed (exit={code}). stderr:\n{(stderr or '').strip()[:4000]}",
                self.tool_name,
            )
        return self._decode_stdout(stdout, code, stderr)
