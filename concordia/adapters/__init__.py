"""Adapters turning each tool's raw output into canonical findings."""

from concordia.adapters.base import AdapterParseError, AdapterRegistry, BaseAdapter, rebase_path
from concordia.adapters.eslint import ESLintAdapter
from concordia.adapters.semgrep import SemgrepAdapter
from concordia.adapters.snyk import SnykAdapter
from concordia.adapters.sonarqube import SonarQubeAdapter


def register_default_adapters() -> None:
    """Register the built-in adapters (idempotent)."""
    AdapterRegistry.register(SemgrepAdapter())
    AdapterRegistry.register(SnykAdapter())
    AdapterRegistry.register(ESLintAdapter())
    AdapterRegistry.register(SonarQubeAdapter())


__all__ = [
    "AdapterParseError",
    "AdapterRegistry",
    "BaseAdapter",
    "rebase_path",
    "register_default_adapters",
    "ESLintAdapter",
    "SemgrepAdapter",
    "SnykAdapter",
    "SonarQubeAdapter",
]
