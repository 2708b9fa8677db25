"""Shared core type aliases used across contracts, scanner, and ports."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Union

NamedParams = Dict[str, Any]
PositionalParams = Sequence[Any]
QueryParams = Union[NamedParams, PositionalParams, None]

ColumnBindingMap = Mapping[str, int]
Columns = List[str]
Row = Sequence[Any]
