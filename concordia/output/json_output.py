"""JSON output formatter for comparison reports."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from concordia import __version__
from concordia.models.report import ComparisonReport
from concordia.models.scan import AdapterResult


class JSONOutputFormatter:
    """Format comparison reports (and adapter results) as JSON."""

    def __init__(self, pretty: bool = True, include_details: bool = True):
        """
        Initialize the formatter.

        Args:
            pretty: Whether to pretty-print JSON
            include_details: Whether to include the per-group overlap lists
        """
        self.pretty = pretty
        self.include_details = include_details

    def format(self, report: ComparisonReport) -> str:
        """Format a comparison report as a JSON string."""
        return self._dumps(self._build_output(report))

    def write(self, report: ComparisonReport, output_path: Path) -> None:
        """Write a comparison report to a JSON file."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            f.write(self.format(report))

    def format_results(self, results: list[AdapterResult]) -> str:
        """Format adapter results (canonical findings per scan) as JSON."""
        return self._dumps(
            {
                "metadata": self._metadata(),
                "results": [r.model_dump(mode="json") for r in results],
            }
        )

    def _build_output(self, report: ComparisonReport) -> dict[str, Any]:
        data = report.to_dict()
        if not self.include_details:
            data.pop("detailed_overlap", None)
            data.pop("detailed_unique", None)
        return {"metadata": self._metadata(), **data}

    def _metadata(self) -> dict[str, Any]:
        return {
            "generated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "concordia_version": __version__,
        }

    def _dumps(self, data: dict[str, Any]) -> str:
        if self.pretty:
            return json.dumps(data, indent=2)
        return json.dumps(data)
