"""Output formatters for comparison reports."""

from concordia.output.console_output import ConsoleOutputFormatter
from concordia.output.json_output import JSONOutputFormatter

__all__ = [
    "ConsoleOutputFormatter",
    "JSONOutputFormatter",
]
