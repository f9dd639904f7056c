"""Severity and category taxonomies."""

from concordia.taxonomy.category import (
    DEFAULT_CATEGORY_RULES,
    CategoryRule,
    classify_category,
    rules_from_config,
)
from concordia.taxonomy.severity import eslint_severity, normalize_severity

__all__ = [
    "CategoryRule",
    "DEFAULT_CATEGORY_RULES",
    "classify_category",
    "rules_from_config",
    "normalize_severity",
    "eslint_severity",
]
