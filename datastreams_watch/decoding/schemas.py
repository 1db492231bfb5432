"""Schema registry mapping report versions to decode layouts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple, Type

from .abi import DecodeError
from .reports import BUILTIN_REPORT_TYPES, DecodedReport


@dataclass(frozen=True)
class ReportSchema:
    """Decode layout for one report version."""

    version: int
    report_type: Type[DecodedReport]
    layout: Tuple[Tuple[str, str, str], ...]

    @property
    def word_count(self) -> int:
        return len(self.layout)


class SchemaRegistry:
    """Lookup table from schema version to :class:`ReportSchema`."""

    def __init__(self, report_types: Optional[Iterable[Type[DecodedReport]]] = None) -> None:
        self._schemas: Dict[int, ReportSchema] = {}
        for report_type in report_types or ():
            self.register(report_type)

    def register(self, report_type: Type[DecodedReport], replace: bool = False) -> ReportSchema:
        """Register a report dataclass under its ``version``."""

        version = report_type.version
        if version <= 0:
            raise ValueError(f"{report_type.__name__} does not declare a schema version")
        if version in self._schemas and not replace:
            raise ValueError(f"Schema version {version} already registered")
        schema = ReportSchema(version=version, report_type=report_type, layout=report_type.layout())
        self._schemas[version] = schema
        return schema

    def get(self, version: int) -> ReportSchema:
        try:
            return self._schemas[version]
        except KeyError:
            raise DecodeError(f"Unrecognized report schema version: {version}") from None

    def versions(self) -> Tuple[int, ...]:
        return tuple(sorted(self._schemas))


DEFAULT_REGISTRY = SchemaRegistry(BUILTIN_REPORT_TYPES)


__all__ = ["DEFAULT_REGISTRY", "ReportSchema", "SchemaRegistry"]
