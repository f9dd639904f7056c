"""Abstract base class and registry for tool adapters."""

import json
import posixpath
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import unquote

from pydantic import ValidationError

from concordia.logging import get_logger
from concordia.models.enums import ToolKind
from concordia.models.finding import CanonicalFinding
from concordia.models.scan import AdapterResult, ScanOutput
from concordia.taxonomy.category import CategoryRule

logger = get_logger("adapters.base")

# Exceptions that mean "this item does not look like what we expected"
ITEM_ERRORS = (KeyError, TypeError, ValueError, IndexError, AttributeError)


class AdapterParseError(Exception):
    """Raised when a tool payload cannot be turned into canonical findings."""

    def __init__(self, message: str, tool_name: str | None = None):
        self.tool_name = tool_name
        super().__init__(f"{tool_name}: {message}" if tool_name else message)


def _normalize_path(path: str) -> str:
    normalized = str(path)
    if normalized.startswith("file://"):
        normalized = unquote(normalized[len("file://") :])
    return posixpath.normpath(normalized.replace("\\", "/"))


def rebase_path(path: str | None, repository_path: str | None) -> str:
    """
    Rebase a tool-reported file path onto the repository root.

    Tools disagree on whether they report absolute paths, file:// URIs or
    paths relative to the scan root. Identity depends on every tool
    producing the same relative string for the same file. The root goes
    through the same normalization as the path, so ``./repo`` and
    ``repo/`` both strip ``repo/src/a.js`` to ``src/a.js``.

    Args:
        path: Path as reported by the tool
        repository_path: Scan root the tool was pointed at

    Returns:
        Forward-slash path relative to the repository root, or the
        normalized path unchanged if it lies outside the root
    """
    if not path:
        return ""

    normalized = _normalize_path(path)

    if repository_path:
        root = _normalize_path(repository_path)
        if root not in (".", "/") and normalized.startswith(root + "/"):
            normalized = normalized[len(root) + 1 :]

    return normalized


def as_int(value: Any) -> int | None:
    """Coerce a line/column value to int, treating junk and zero as absent."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def as_list(value: Any) -> list:
    """Wrap scalar metadata values in a list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


class BaseAdapter(ABC):
    """
    Turns one tool's raw output into canonical findings.

    Adapters hold no per-call state, so a single instance may be used from
    several threads at once.
    """

    @property
    @abstractmethod
    def tool_kind(self) -> ToolKind:
        """Return the kind of tool this adapter handles."""
        ...

    @property
    def tool_name(self) -> str:
        """Default provenance name used when the scan record carries none."""
        return self.tool_kind.value

    @abstractmethod
    def _extract(
        self,
        raw_output: Any,
        repository_path: str,
        tool_name: str,
        category_rules: tuple[CategoryRule, ...] | None,
    ) -> list[CanonicalFinding]:
        """
        Convert a decoded payload into canonical findings.

        Raises:
            AdapterParseError: If the payload is structurally unusable
        """
        ...

    def adapt(
        self,
        scan_output: ScanOutput | Mapping[str, Any],
        category_rules: tuple[CategoryRule, ...] | None = None,
    ) -> AdapterResult:
        """
        Adapt one scan output. Never raises.

        A failed scan or an unparsable payload yields success=False with
        the error message and no findings.
        """
        try:
            record = (
                scan_output
                if isinstance(scan_output, ScanOutput)
                else ScanOutput.model_validate(scan_output)
            )
        except ValidationError as e:
            logger.error("Invalid scan record for %s: %s", self.tool_name, e)
            return AdapterResult(tool_name=self.tool_name, success=False, error=str(e))

        tool_name = record.tool_name or self.tool_name

        if not record.success:
            error = record.error or "Scan did not complete"
            logger.warning("%s scan of %s failed: %s", tool_name, record.repository_name, error)
            return AdapterResult(
                tool_name=tool_name, repository=record.repository_name, success=False, error=error
            )

        try:
            raw = self._decode(record.raw_output)
            findings = self._extract(raw, record.repository_path, tool_name, category_rules)
        except AdapterParseError as e:
            logger.error("Could not parse %s output: %s", tool_name, e)
            return AdapterResult(
                tool_name=tool_name, repository=record.repository_name, success=False, error=str(e)
            )
        except Exception as e:
            logger.error("Unexpected %s payload: %s", tool_name, e)
            return AdapterResult(
                tool_name=tool_name,
                repository=record.repository_name,
                success=False,
                error=f"Failed to parse: {e}",
            )

        logger.info("Adapted %d findings from %s", len(findings), tool_name)
        return AdapterResult(tool_name=tool_name, repository=record.repository_name, findings=findings)

    def _decode(self, raw_output: Any) -> Any:
        """Decode a JSON text payload; pass already-decoded payloads through."""
        if isinstance(raw_output, (bytes, bytearray)):
            raw_output = raw_output.decode("utf-8", errors="replace")
        if isinstance(raw_output, str):
            try:
                return json.loads(raw_output)
            except json.JSONDecodeError as e:
                raise AdapterParseError(f"Invalid JSON: {e}", self.tool_name)
        return raw_output

    def _parse_items(
        self,
        items: Iterable[Any],
        parse_item: Callable[[Any], CanonicalFinding | None],
    ) -> list[CanonicalFinding]:
        """
        Parse items one by one, skipping malformed ones.

        If every item fails the payload is treated as unparsable.
        """
        findings = []
        skipped = 0
        total = 0

        for item in items:
            total += 1
            try:
                finding = parse_item(item)
                if finding is not None:
                    findings.append(finding)
            except ITEM_ERRORS as e:
                logger.warning("Skipping malformed %s item: %s", self.tool_name, e)
                skipped += 1

        if skipped > 0:
            logger.error(
                "Skipped %d of %d %s items, possible schema change",
                skipped, total, self.tool_name,
            )

        if total > 0 and skipped == total:
            raise AdapterParseError(
                f"All {total} items failed to parse, likely schema change", self.tool_name
            )

        return findings

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} tool={self.tool_name}>"


class AdapterRegistry:
    """Registry of available adapters, keyed by tool kind."""

    _adapters: dict[ToolKind, BaseAdapter] = {}

    @classmethod
    def register(cls, adapter: BaseAdapter) -> None:
        """Register an adapter idempotently (skip if its kind is already registered)."""
        if adapter.tool_kind not in cls._adapters:
            cls._adapters[adapter.tool_kind] = adapter

    @classmethod
    def get(cls, tool: ToolKind | str | None) -> BaseAdapter | None:
        """Find the adapter for a tool kind or display name."""
        kind = ToolKind.from_tool_name(tool)
        if kind is None:
            return None
        return cls._adapters.get(kind)

    @classmethod
    def get_all_adapters(cls) -> list[BaseAdapter]:
        """Return all registered adapters."""
        return list(cls._adapters.values())

    @classmethod
    def clear(cls) -> None:
        """Clear all registered adapters (useful for testing)."""
        cls._adapters = {}

    @classmethod
    def adapt_all(
        cls,
        scan_outputs: Iterable[ScanOutput | Mapping[str, Any]],
        category_rules: tuple[CategoryRule, ...] | None = None,
    ) -> list[AdapterResult]:
        """
        Run every scan output through its adapter.

        A record with no matching adapter becomes a failed result rather
        than aborting the batch.
        """
        results = []
        for scan_output in scan_outputs:
            if isinstance(scan_output, ScanOutput):
                tool_name = scan_output.tool_name
            elif isinstance(scan_output, Mapping):
                tool_name = str(scan_output.get("tool_name", ""))
            else:
                tool_name = ""
            adapter = cls.get(tool_name)
            if adapter is None:
                logger.warning("No adapter registered for tool %r", tool_name)
                results.append(
                    AdapterResult(
                        tool_name=tool_name or "unknown",
                        success=False,
                        error=f"No adapter registered for tool '{tool_name}'",
                    )
                )
                continue
            results.append(adapter.adapt(scan_output, category_rules=category_rules))
        return results
