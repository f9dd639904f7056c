"""JSON-file persistence for canonical findings."""

import hashlib
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from pydantic import ValidationError

from concordia.logging import get_logger
from concordia.models.finding import CanonicalFinding

logger = get_logger("storage")


class StorageError(Exception):
    """Raised when the store cannot be read or written."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def _file_stem(name: str) -> str:
    """Readable slug plus a digest of the exact name, so distinct names never share a file."""
    slug = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._") or "repository"
    digest = hashlib.sha256(name.encode("utf-8")).hexdigest()[:12]
    return f"{slug}-{digest}"


class FindingStore:
    """
    Stores canonical findings per repository in one JSON document each.

    Every ``store`` call records a new analysis for one tool. Fetching
    returns the most recent analysis of each tool, so a re-scan replaces
    the earlier view instead of double counting it.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def _path_for(self, repository: str) -> Path:
        return self.root / f"{_file_stem(repository)}.json"

    def _load(self, repository: str) -> dict[str, Any]:
        path = self._path_for(repository)
        if not path.exists():
            return {"repository": repository, "analyses": []}
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Invalid JSON: {e}", path)
        if not isinstance(data, dict) or not isinstance(data.get("analyses"), list):
            raise StorageError("Not a finding store document", path)
        if data.get("repository", repository) != repository:
            raise StorageError(
                f"Document belongs to {data['repository']!r}, not {repository!r}", path
            )
        return data

    def _save(self, repository: str, data: dict[str, Any]) -> None:
        path = self._path_for(repository)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(path)

    def store(
        self,
        repository: str,
        tool_name: str,
        findings: list[CanonicalFinding],
        tool_version: str | None = None,
    ) -> list[str]:
        """
        Persist one tool's findings for a repository.

        Returns:
            Generated ids, one per finding, in input order
        """
        data = self._load(repository)
        ids = [str(uuid4()) for _ in findings]
        data["analyses"].append(
            {
                "analysis_id": str(uuid4()),
                "tool_name": tool_name,
                "tool_version": tool_version,
                "stored_at": datetime.now(timezone.utc).isoformat(),
                "findings": [
                    {"id": finding_id, **finding.to_dict()}
                    for finding_id, finding in zip(ids, findings)
                ],
            }
        )
        self._save(repository, data)
        logger.info("Stored %d %s findings for %s", len(findings), tool_name, repository)
        return ids

    def fetch_by_repository(self, repository: str) -> dict[str, list[CanonicalFinding]]:
        """Return the latest stored findings of each tool for a repository."""
        data = self._load(repository)
        latest: dict[str, dict[str, Any]] = {}
        for analysis in data["analyses"]:
            # Later entries were appended later
            latest[analysis["tool_name"]] = analysis

        findings_by_tool = {}
        for tool_name, analysis in latest.items():
            try:
                findings_by_tool[tool_name] = [
                    CanonicalFinding.model_validate(
                        {k: v for k, v in item.items() if k != "id"}
                    )
                    for item in analysis.get("findings", [])
                ]
            except ValidationError as e:
                raise StorageError(
                    f"Corrupt {tool_name} finding: {e}", self._path_for(repository)
                )
        return findings_by_tool

    def repositories(self) -> list[str]:
        """Return the names of all repositories with stored findings."""
        if not self.root.is_dir():
            return []
        names = []
        for path in sorted(self.root.glob("*.json")):
            try:
                with open(path) as f:
                    names.append(json.load(f).get("repository") or path.stem)
            except (json.JSONDecodeError, OSError, AttributeError) as e:
                logger.warning("Skipping unreadable store file %s: %s", path, e)
        return names
