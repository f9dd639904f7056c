"""Enumerations for canonical finding classifications."""

from enum import Enum


class Severity(str, Enum):
    """Canonical four-level severity scale."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def numeric(self) -> int:
        """Return numeric severity for sorting (higher = more severe)."""
        return {
            self.CRITICAL: 4,
            self.HIGH: 3,
            self.MEDIUM: 2,
            self.LOW: 1,
        }[self]


class Category(str, Enum):
    """Fixed vulnerability category vocabulary."""

    XSS = "XSS"
    SQL_INJECTION = "SQL Injection"
    COMMAND_INJECTION = "Command Injection"
    PATH_TRAVERSAL = "Path Traversal"
    SSRF = "SSRF"
    CSRF = "CSRF"
    HARDCODED_CREDENTIALS = "Hardcoded Credentials"
    INSECURE_DESERIALIZATION = "Insecure Deserialization"
    CRYPTOGRAPHY = "Cryptography"
    AUTH_FLAWS = "Auth Flaws"
    SESSION_MANAGEMENT = "Session Management"
    OPEN_REDIRECT = "Open Redirect"
    REDOS = "ReDoS"
    OTHER = "Other"

    @classmethod
    def lookup(cls, value: str | None) -> "Category | None":
        """Return the category whose value matches case-insensitively, if any."""
        if not value:
            return None
        normalized = value.strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return None


class Confidence(str, Enum):
    """Confidence levels reported alongside findings."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @classmethod
    def from_string(cls, value) -> "Confidence":
        """Convert string to Confidence, defaulting to MEDIUM."""
        if not isinstance(value, str):
            return cls.MEDIUM
        mapping = {
            "high": cls.HIGH,
            "certain": cls.HIGH,
            "medium": cls.MEDIUM,
            "firm": cls.MEDIUM,
            "low": cls.LOW,
            "tentative": cls.LOW,
        }
        return mapping.get(value.lower().strip(), cls.MEDIUM)


class ToolKind(str, Enum):
    """Supported static-analysis tools."""

    SEMGREP = "semgrep"
    SNYK = "snyk"
    ESLINT = "eslint"
    SONARQUBE = "sonarqube"

    @classmethod
    def from_tool_name(cls, name: "str | ToolKind | None") -> "ToolKind | None":
        """
        Resolve a tool display name to its kind.

        Scanners report names like "Snyk Code" or "ESLint-Security", so the
        match is on the leading word, case-insensitive.
        """
        if isinstance(name, ToolKind):
            return name
        if not isinstance(name, str) or not name.strip():
            return None
        normalized = name.strip().lower()
        for member in cls:
            if normalized == member.value:
                return member
        head = normalized.replace("_", " ").replace("-", " ").split()[0]
        aliases = {
            "semgrep": cls.SEMGREP,
            "snyk": cls.SNYK,
            "eslint": cls.ESLINT,
            "sonarqube": cls.SONARQUBE,
            "sonar": cls.SONARQUBE,
            "sonarcloud": cls.SONARQUBE,
        }
        return aliases.get(head)
