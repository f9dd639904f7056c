"""Canonical finding model shared by every tool adapter."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from concordia.models.enums import Category, Severity


class FindingLocation(BaseModel):
    """Where in the scanned repository a finding was reported."""

    model_config = ConfigDict(frozen=True)

    path: str = ""  # Relative to the repository root
    start_line: int | None = None
    end_line: int | None = None
    start_column: int | None = None
    end_column: int | None = None


class CanonicalFinding(BaseModel):
    """
    Tool-agnostic representation of a single reported vulnerability.

    Two findings with the same (rule_id, path, start_line, category) are the
    same vulnerability, whichever tool reported them and whatever their
    message or metadata say.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    rule_id: str
    severity: Severity = Severity.MEDIUM
    category: Category = Category.OTHER
    location: FindingLocation = Field(default_factory=FindingLocation)
    message: str = ""
    tool_name: str

    # Advisory only: confidence, cwe, owasp, references, code_snippet, ...
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("rule_id")
    @classmethod
    def _rule_id_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("rule_id must be a non-empty string")
        return value

    def identity(self) -> tuple[str, str, int | None, str]:
        """Return the tuple that determines this finding's identity."""
        return (
            self.rule_id,
            self.location.path,
            self.location.start_line,
            Category(self.category).value,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return self.model_dump(mode="json")
