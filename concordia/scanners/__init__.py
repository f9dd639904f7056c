"""Runners for the external static-analysis tools."""

from concordia.models.enums import ToolKind
from concordia.scanners.base import BaseScanner, ScanError, scan_repositories
from concordia.scanners.eslint import ESLintScanner
from concordia.scanners.semgrep import SemgrepScanner
from concordia.scanners.snyk import SnykScanner
from concordia.scanners.sonarqube import SonarQubeScanner


def build_scanners(tools, scanners_config) -> list[BaseScanner]:
    """Instantiate scanners for the requested tools from configuration."""
    scanners: list[BaseScanner] = []
    for tool in tools:
        kind = ToolKind.from_tool_name(tool)
        if kind is ToolKind.SEMGREP:
            scanners.append(
                SemgrepScanner(config=scanners_config.semgrep_config, timeout=scanners_config.timeout)
            )
        elif kind is ToolKind.SNYK:
            scanners.append(SnykScanner(timeout=scanners_config.timeout))
        elif kind is ToolKind.ESLINT:
            scanners.append(
                ESLintScanner(config_path=scanners_config.eslint_config, timeout=scanners_config.timeout)
            )
        elif kind is ToolKind.SONARQUBE:
            scanners.append(
                SonarQubeScanner(
                    host_url=scanners_config.sonar_host_url,
                    organization=scanners_config.sonar_organization,
                    token_env=scanners_config.sonar_token_env,
                    timeout=scanners_config.timeout,
                )
            )
        else:
            raise ValueError(f"Unknown tool: {tool}")
    return scanners


__all__ = [
    "BaseScanner",
    "ScanError",
    "scan_repositories",
    "build_scanners",
    "ESLintScanner",
    "SemgrepScanner",
    "SnykScanner",
    "SonarQubeScanner",
]
