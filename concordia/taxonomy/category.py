"""Keyword-based category classification for findings without a category."""

from pydantic import BaseModel, ConfigDict

from concordia.logging import get_logger
from concordia.models.enums import Category

logger = get_logger("taxonomy.category")


class CategoryRule(BaseModel):
    """A case-insensitive substring pattern and the category it implies."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    pattern: str
    category: Category

    def matches(self, text: str) -> bool:
        """Check whether this rule's pattern occurs in already-lowercased text."""
        return bool(self.pattern) and self.pattern.lower() in text


def _rule(pattern: str, category: Category) -> CategoryRule:
    return CategoryRule(pattern=pattern, category=category)


# Evaluated top to bottom; the first matching pattern wins. A finding that
# mentions both "sql" and "xss" is therefore XSS.
DEFAULT_CATEGORY_RULES: tuple[CategoryRule, ...] = (
    _rule("xss", Category.XSS),
    _rule("unsanitized", Category.XSS),
    _rule("sql", Category.SQL_INJECTION),
    _rule("command", Category.COMMAND_INJECTION),
    _rule("child-process", Category.COMMAND_INJECTION),
    _rule("traversal", Category.PATH_TRAVERSAL),
    _rule("path", Category.PATH_TRAVERSAL),
    _rule("ssrf", Category.SSRF),
    _rule("csrf", Category.CSRF),
    _rule("hardcoded", Category.HARDCODED_CREDENTIALS),
    _rule("password", Category.HARDCODED_CREDENTIALS),
    _rule("secret", Category.HARDCODED_CREDENTIALS),
    _rule("deserializ", Category.INSECURE_DESERIALIZATION),
    _rule("crypto", Category.CRYPTOGRAPHY),
    _rule("session", Category.SESSION_MANAGEMENT),
    _rule("redirect", Category.OPEN_REDIRECT),
    _rule("auth", Category.AUTH_FLAWS),
    _rule("regex", Category.REDOS),
    _rule("redos", Category.REDOS),
)


def rules_from_config(entries: list[dict]) -> tuple[CategoryRule, ...]:
    """
    Build an ordered rule list from configuration entries.

    Each entry is a mapping with ``pattern`` and ``category`` keys; the
    category may be given by value ("SQL Injection") in any letter case.
    Entries naming an unknown category are skipped with a warning.
    """
    rules = []
    for entry in entries:
        category = Category.lookup(str(entry.get("category", "")))
        pattern = str(entry.get("pattern", "")).strip()
        if category is None or not pattern:
            logger.warning("Ignoring invalid category rule: %r", entry)
            continue
        rules.append(CategoryRule(pattern=pattern, category=category))
    return tuple(rules)


def classify_category(
    rule_id: str | None,
    message: str | None,
    existing_category: str | None = None,
    rules: tuple[CategoryRule, ...] | list[CategoryRule] | None = None,
) -> Category:
    """
    Resolve the category of a finding.

    A tool-supplied category that names a known category is authoritative
    and returned as-is. Otherwise the ordered rules are matched against the
    rule id and message (and any unrecognised tool category), and the first
    hit wins. Falls back to Other. Never raises.

    Args:
        rule_id: Tool rule identifier
        message: Finding message
        existing_category: Category supplied by the tool, if any
        rules: Ordered rules; defaults to DEFAULT_CATEGORY_RULES

    Returns:
        Resolved Category
    """
    parts = [rule_id or "", message or ""]

    if existing_category and str(existing_category).strip():
        known = Category.lookup(str(existing_category))
        if known is not None:
            return known
        parts.append(str(existing_category))

    text = " ".join(parts).lower()
    for rule in DEFAULT_CATEGORY_RULES if rules is None else rules:
        if rule.matches(text):
            return rule.category

    return Category.OTHER
