"""Base class for running external scanners and collecting their raw output."""

import json
import subprocess
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from concordia.logging import get_logger
from concordia.models.enums import ToolKind
from concordia.models.scan import ScanOutput

logger = get_logger("scanners.base")

DEFAULT_EXCLUDES = [
    ".git",
    "node_modules",
    ".venv",
    "venv",
    "__pycache__",
    "dist",
    "build",
    "coverage",
]


class ScanError(Exception):
    """Raised when an external scanner cannot produce usable output."""

    def __init__(self, message: str, tool_name: str | None = None):
        self.tool_name = tool_name
        super().__init__(f"{tool_name}: {message}" if tool_name else message)


def run_cmd(
    cmd: Sequence[str], cwd: str | None = None, timeout: int = 900
) -> tuple[int, str, str]:
    """Run a command and return (exit code, stdout, stderr)."""
    p = subprocess.run(
        list(cmd),
        cwd=cwd,
        timeout=timeout,
        text=True,
        capture_output=True,
    )
    return p.returncode, p.stdout, p.stderr


class BaseScanner(ABC):
    """
    Runs one external tool against a repository.

    ``scan`` never raises: any failure is reported as a ScanOutput with
    success=False so that sibling scans keep going.
    """

    def __init__(self, timeout: int = 900):
        self.timeout = timeout
        self._version: str | None = None

    @property
    @abstractmethod
    def tool_kind(self) -> ToolKind:
        """Return the kind of tool this scanner runs."""
        ...

    @property
    @abstractmethod
    def tool_name(self) -> str:
        """Display name recorded as provenance on every finding."""
        ...

    @property
    @abstractmethod
    def version_command(self) -> list[str]:
        """Command printing the tool version."""
        ...

    @abstractmethod
    def _run(self, repository_path: Path) -> Any:
        """
        Run the tool and return its decoded raw output.

        Raises:
            ScanError: If the tool fails or its output is unusable
        """
        ...

    @property
    def version(self) -> str:
        """Tool version, looked up once."""
        if self._version is None:
            try:
                code, stdout, _ = run_cmd(self.version_command, timeout=60)
                self._version = stdout.strip().splitlines()[0] if code == 0 and stdout.strip() else "unknown"
            except (OSError, subprocess.SubprocessError):
                self._version = "unknown"
        return self._version

    def scan(self, repository_path: str | Path) -> ScanOutput:
        """Scan one repository, recording its resolved absolute path as the root."""
        path = Path(repository_path).resolve()
        started = time.monotonic()
        scan_date = datetime.now(timezone.utc)
        logger.info("[%s] Scanning %s...", self.tool_name, path.name)

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        try:
            if not path.is_dir():
                raise ScanError(f"Repository not found: {path}", self.tool_name)
            raw_output = self._run(path)
        except (ScanError, OSError, subprocess.SubprocessError) as e:
            logger.error("[%s] Error scanning %s: %s", self.tool_name, path.name, e)
            return ScanOutput(
                tool_name=self.tool_name,
                tool_version=self.version,
                repository=path.name,
                repository_path=str(path),
                scan_date=scan_date,
                scan_duration_ms=elapsed_ms(),
                success=False,
                error=str(e),
            )

        logger.info("[%s] Finished %s in %dms", self.tool_name, path.name, elapsed_ms())
        return ScanOutput(
            tool_name=self.tool_name,
            tool_version=self.version,
            repository=path.name,
            repository_path=str(path),
            scan_date=scan_date,
            scan_duration_ms=elapsed_ms(),
            success=True,
            raw_output=raw_output,
        )

    def _decode_stdout(self, stdout: str, code: int, stderr: str) -> Any:
        """Decode JSON printed on stdout, failing with the tool's stderr."""
        if not stdout.strip():
            raise ScanError(
                f"no output (exit={code}). stderr:\n{(stderr or '').strip()[:4000]}",
                self.tool_name,
            )
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise ScanError(f"invalid JSON output (exit={code}): {e}", self.tool_name)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} tool={self.tool_name}>"


def scan_repositories(
    scanners: Sequence[BaseScanner],
    repository_paths: Sequence[str | Path],
    max_workers: int = 4,
) -> list[ScanOutput]:
    """
    Run every scanner against every repository concurrently.

    Returns only once all scans have finished, in (repository, scanner)
    order.
    """
    jobs = [(scanner, path) for path in repository_paths for scanner in scanners]
    if not jobs:
        return []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = [executor.submit(scanner.scan, path) for scanner, path in jobs]
        return [future.result() for future in futures]
