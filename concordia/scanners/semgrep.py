"""Semgrep scanner."""

from pathlib import Path
from typing import Any

from concordia.models.enums import ToolKind
from concordia.scanners.base import DEFAULT_EXCLUDES, BaseScanner, ScanError, run_cmd


class SemgrepScanner(BaseScanner):
    """Runs ``semgrep scan --json`` against a repository."""

    def __init__(self, config: str = "auto", timeout: int = 900):
        super().__init__(timeout=timeout)
        self.config = config

    @property
    def tool_kind(self) -> ToolKind:
        return ToolKind.SEMGREP

    @property
    def tool_name(self) -> str:
        return "Semgrep"

    @property
    def version_command(self) -> list[str]:
        return ["semgrep", "--version"]

    def _run(self, repository_path: Path) -> Any:
        cmd = ["semgrep", "scan", "--config", self.config, "--json", "--quiet"]
        for exclude in DEFAULT_EXCLUDES:
            cmd.extend(["--exclude", exclude])
        cmd.append(str(repository_path))

        code, stdout, stderr = run_cmd(cmd, timeout=self.timeout)

        # Semgrep exits 1 when it has findings; anything above that is a failure
        if code > 1:
            raise ScanError(
                f"semgrep failed (exit={code}). stderr:\n{(stderr or '').strip()[:4000]}",
                self.tool_name,
            )
        return self._decode_stdout(stdout, code, stderr)
