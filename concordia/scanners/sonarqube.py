"""SonarQube / SonarCloud scanner."""

import os
import time
from pathlib import Path
from typing import Any

import httpx

from concordia.logging import get_logger
from concordia.models.enums import ToolKind
from concordia.scanners.base import BaseScanner, ScanError, run_cmd

logger = get_logger("scanners.sonarqube")


class SonarQubeScanner(BaseScanner):
    """
    Runs ``sonar-scanner`` and then fetches the resulting issues over HTTP.

    Analysis happens server-side, so the issues are only requested after
    ``processing_delay`` seconds.
    """

    ISSUES_ENDPOINT = "/api/issues/search"
    PAGE_SIZE = 500

    def __init__(
        self,
        host_url: str = "https://sonarcloud.io",
        organization: str | None = None,
        token_env: str = "SONAR_TOKEN",
        processing_delay: float = 5.0,
        timeout: int = 900,
        http_timeout: float = 30.0,
    ):
        super().__init__(timeout=timeout)
        self.host_url = host_url.rstrip("/")
        self.organization = organization
        self.token_env = token_env
        self.processing_delay = processing_delay
        self.http_timeout = http_timeout

    @property
    def tool_kind(self) -> ToolKind:
        return ToolKind.SONARQUBE

    @property
    def tool_name(self) -> str:
        return "SonarQube"

    @property
    def version_command(self) -> list[str]:
        return ["sonar-scanner", "--version"]

    def project_key(self, repository_path: Path) -> str:
        """Project key used for a repository."""
        return f"concordia-{repository_path.name}"

    def _run(self, repository_path: Path) -> Any:
        token = os.environ.get(self.token_env)
        if not token:
            raise ScanError(f"{self.token_env} is not set", self.tool_name)

        project_key = self.project_key(repository_path)
        cmd = [
            "sonar-scanner",
            f"-Dsonar.projectKey={project_key}",
            f"-Dsonar.projectName={repository_path.name}",
            "-Dsonar.sources=.",
            f"-Dsonar.host.url={self.host_url}",
            "-Dsonar.sourceEncoding=UTF-8",
            "-Dsonar.exclusions=**/node_modules/**,**/test/**,**/*.test.js",
            f"-Dsonar.token={token}",
        ]
        if self.organization:
            cmd.append(f"-Dsonar.organization={self.organization}")

        code, _, stderr = run_cmd(cmd, cwd=str(repository_path), timeout=self.timeout)
        if code != 0:
            raise ScanError(
                f"sonar-scanner failed (exit={code}). stderr:\n{(stderr or '').strip()[:4000]}",
                self.tool_name,
            )

        logger.info("[%s] Waiting for analysis of %s to complete...", self.tool_name, project_key)
        time.sleep(self.processing_delay)
        return self.fetch_issues(project_key, token)

    def fetch_issues(self, project_key: str, token: str) -> dict[str, Any]:
        """Fetch vulnerability and hotspot issues for a project."""
        params = {
            "componentKeys": project_key,
            "types": "VULNERABILITY,SECURITY_HOTSPOT",
            "ps": self.PAGE_SIZE,
        }
        try:
            with httpx.Client(
                base_url=self.host_url, auth=(token, ""), timeout=self.http_timeout
            ) as client:
                response = client.get(self.ISSUES_ENDPOINT, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            raise ScanError(f"Could not fetch issues: {e}", self.tool_name)
        except ValueError as e:
            raise ScanError(f"Invalid issues response: {e}", self.tool_name)
