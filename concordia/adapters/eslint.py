"""Adapter for ESLint JSON output (eslint-plugin-security, eslint-plugin-no-unsanitized)."""

from typing import Any

from concordia.adapters.base import AdapterParseError, BaseAdapter, as_int, rebase_path
from concordia.logging import get_logger
from concordia.models.enums import Category, Confidence, ToolKind
from concordia.models.finding import CanonicalFinding, FindingLocation
from concordia.taxonomy.category import CategoryRule, classify_category
from concordia.taxonomy.severity import eslint_severity

logger = get_logger("adapters.eslint")

RULE_DESCRIPTIONS = {
    "security/detect-object-injection": "Bracket object notation with user input is potentially unsafe",
    "security/detect-non-literal-regexp": "RegExp constructed from non-literal input",
    "security/detect-unsafe-regex": "Potentially unsafe regular expression (ReDoS)",
    "security/detect-buffer-noassert": "Buffer allocation without proper assertion",
    "security/detect-child-process": "Child process execution detected",
    "security/detect-disable-mustache-escape": "Mustache escaping disabled",
    "security/detect-eval-with-expression": "Eval with expression detected",
    "security/detect-no-csrf-before-method-override": "CSRF middleware not before method override",
    "security/detect-non-literal-fs-filename": "Non-literal filesystem path",
    "security/detect-non-literal-require": "Non-literal require statement",
    "security/detect-possible-timing-attacks": "Possible timing attack vulnerability",
    "security/detect-pseudoRandomBytes": "Use of pseudo-random bytes for security",
    "no-unsanitized/method": "Unsanitized method call (potential XSS)",
    "no-unsanitized/property": "Unsanitized property assignment (potential XSS)",
}

# Plugin rules whose category is implied by the rule itself
RULE_CATEGORIES = {
    "security/detect-child-process": Category.COMMAND_INJECTION,
    "security/detect-unsafe-regex": Category.REDOS,
    "security/detect-non-literal-regexp": Category.REDOS,
    "security/detect-no-csrf-before-method-override": Category.CSRF,
    "security/detect-pseudoRandomBytes": Category.CRYPTOGRAPHY,
    "security/detect-non-literal-fs-filename": Category.PATH_TRAVERSAL,
    "security/detect-non-literal-require": Category.PATH_TRAVERSAL,
    "security/detect-disable-mustache-escape": Category.XSS,
    "no-unsanitized/method": Category.XSS,
    "no-unsanitized/property": Category.XSS,
}


class ESLintAdapter(BaseAdapter):
    """Adapter for the per-file result array of ``eslint --format json``."""

    @property
    def tool_kind(self) -> ToolKind:
        return ToolKind.ESLINT

    def _extract(
        self,
        raw_output: Any,
        repository_path: str,
        tool_name: str,
        category_rules: tuple[CategoryRule, ...] | None,
    ) -> list[CanonicalFinding]:
        """Parse ESLint JSON output."""
        if raw_output is None:
            return []
        if not isinstance(raw_output, list):
            raise AdapterParseError(
                f"Expected a JSON array of file results, got {type(raw_output).__name__}",
                tool_name,
            )

        pairs = []
        for file_result in raw_output:
            if not isinstance(file_result, dict):
                raise AdapterParseError("File result is not an object", tool_name)
            path = rebase_path(file_result.get("filePath"), repository_path)
            for message in file_result.get("messages") or []:
                pairs.append((path, message))

        return self._parse_items(
            pairs,
            lambda pair: self._parse_message(pair[1], pair[0], tool_name, category_rules),
        )

    def _parse_message(
        self,
        message: dict,
        path: str,
        tool_name: str,
        category_rules: tuple[CategoryRule, ...] | None,
    ) -> CanonicalFinding | None:
        """Parse a single ESLint message."""
        rule_id = message.get("ruleId")
        if not rule_id:
            # Fatal parse errors and the like carry no rule
            logger.debug("Ignoring ESLint message without a rule in %s: %s", path, message.get("message"))
            return None

        text = message.get("message") or "Security issue detected"
        start_line = as_int(message.get("line"))
        start_column = as_int(message.get("column"))
        known_category = RULE_CATEGORIES.get(rule_id)

        return CanonicalFinding(
            rule_id=rule_id,
            severity=eslint_severity(message.get("severity"), rule_id),
            category=classify_category(
                rule_id,
                text,
                existing_category=known_category.value if known_category else None,
                rules=category_rules,
            ),
            location=FindingLocation(
                path=path,
                start_line=start_line,
                end_line=as_int(message.get("endLine")) or start_line,
                start_column=start_column,
                end_column=as_int(message.get("endColumn")) or start_column,
            ),
            message=text,
            tool_name=tool_name,
            metadata={
                "rule_description": RULE_DESCRIPTIONS.get(rule_id, rule_id),
                "confidence": Confidence.HIGH.value,
                "code_snippet": None,
                "fix": "available" if message.get("fix") else None,
            },
        )
