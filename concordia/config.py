"""Configuration management for Concordia."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

from concordia.taxonomy.category import DEFAULT_CATEGORY_RULES, CategoryRule, rules_from_config


class OutputConfig(BaseModel):
    """Output configuration."""

    model_config = ConfigDict(extra="ignore")

    format: Literal["json", "console"] = "console"
    path: str | None = None
    pretty: bool = True
    show_details: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="ignore")

    level: Literal["debug", "info", "warning", "error"] = "info"
    file: str | None = None
    format: Literal["simple", "detailed"] = "simple"


class ClassifierConfig(BaseModel):
    """
    Category classifier configuration.

    ``rules`` replaces the default keyword list entirely when non-empty;
    order is significant.
    """

    model_config = ConfigDict(extra="ignore")

    rules: list[dict] = Field(default_factory=list)

    def resolved_rules(self) -> tuple[CategoryRule, ...]:
        """Return the configured rules, or the defaults when none are set."""
        if not self.rules:
            return DEFAULT_CATEGORY_RULES
        return rules_from_config(self.rules)


class StorageConfig(BaseModel):
    """Finding store configuration."""

    model_config = ConfigDict(extra="ignore")

    path: str = ".concordia/store"


class ScannersConfig(BaseModel):
    """External scanner configuration."""

    model_config = ConfigDict(extra="ignore")

    tools: list[Literal["semgrep", "snyk", "eslint", "sonarqube"]] = Field(
        default_factory=lambda: ["semgrep", "snyk"]
    )
    timeout: int = 900
    max_workers: int = 4
    semgrep_config: str = "auto"
    eslint_config: str | None = None
    sonar_host_url: str = "https://sonarcloud.io"
    sonar_organization: str | None = None
    sonar_token_env: str = "SONAR_TOKEN"


class ConcordiaConfig(BaseModel):
    """Main Concordia configuration."""

    model_config = ConfigDict(extra="ignore")

    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    scanners: ScannersConfig = Field(default_factory=ScannersConfig)


def load_config(config_path: Path | None = None) -> ConcordiaConfig:
    """
    Load configuration from file.

    Search order:
    1. Explicit path if provided
    2. ./concordia.yaml in current directory
    3. ~/.concordia/config.yaml in home directory
    4. Default empty config

    Args:
        config_path: Optional explicit path to config file

    Returns:
        ConcordiaConfig instance with loaded or default values
    """
    search_paths: list[Path] = []

    if config_path:
        search_paths.append(Path(config_path))
    else:
        search_paths.append(Path.cwd() / "concordia.yaml")
        search_paths.append(Path.cwd() / "concordia.yml")
        search_paths.append(Path.cwd() / ".concordia.yaml")
        search_paths.append(Path.cwd() / ".concordia.yml")
        home_config_dir = Path.home() / ".concordia"
        search_paths.append(home_config_dir / "config.yaml")
        search_paths.append(home_config_dir / "config.yml")

    for path in search_paths:
        if path.exists() and path.is_file():
            return _load_config_from_file(path)

    return ConcordiaConfig()


def _load_config_from_file(path: Path) -> ConcordiaConfig:
    """Load configuration from a specific file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return ConcordiaConfig(**data)


def merge_cli_with_config(
    config: ConcordiaConfig,
    *,
    output_format: str | None = None,
    output_path: str | None = None,
    show_details: bool | None = None,
    log_level: str | None = None,
    store_path: str | None = None,
    tools: list[str] | None = None,
) -> ConcordiaConfig:
    """
    Merge CLI options with config file settings.

    CLI options take precedence over config file values; None means
    "use the config value".
    """
    data = config.model_dump()

    if output_format is not None:
        data["output"]["format"] = output_format
    if output_path is not None:
        data["output"]["path"] = output_path
    if show_details is not None:
        data["output"]["show_details"] = show_details
    if log_level is not None:
        data["logging"]["level"] = log_level
    if store_path is not None:
        data["storage"]["path"] = store_path
    if tools:
        data["scanners"]["tools"] = list(tools)

    return ConcordiaConfig(**data)
