"""Row scanning from DB-API cursors into dataclass destinations.

Columns are bound by name, case-insensitively, through a column binding map
(see `tags.bind_columns`). The column order of the result set does not need
to match the field order of the destination, and result columns without a
binding are discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar, Union

from .codecs import deserialize_column_value, validate_field_codec
from .contracts import CursorPort
from .errors import NoRowsError, RowScanError, SchemaError
from .models import DataclassModel, model_fields, require_dataclass_model
from .tags import bind_columns
from .types import ColumnBindingMap, Columns, Row

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DataclassModel)


class RowErrorPolicy(str, Enum):
    """What `scan_all` does with a row that cannot be bound."""

    SKIP = "skip"
    RAISE = "raise"


RowErrorPolicyInput = Union[RowErrorPolicy, str]


@dataclass(frozen=True)
class _FieldTarget:
    model: Type[Any]
    name: str

    def write(self, values: Dict[str, Any], value: Any) -> None:
        values[self.name] = deserialize_column_value(self.model, self.name, value)


class _DiscardTarget:
    """Write-only sink for result columns with no binding."""

    __slots__ = ()

    def write(self, values: Dict[str, Any], value: Any) -> None:
        return None


_DISCARD = _DiscardTarget()

ScanTarget = Union[_FieldTarget, _DiscardTarget]


def cursor_columns(cursor: CursorPort) -> Columns:
    """Return the column names of the cursor's current result set.

    Raises:
        SchemaError: If the cursor cannot describe its columns.
    """

    try:
        description = cursor.description
    except Exception as exc:
        raise SchemaError(f"Cannot read cursor columns: {exc}") from exc
    if not description:
        raise SchemaError("Cursor has no description; cannot enumerate result columns.")
    return [str(column[0]) for column in description]


def scan_targets(
    model: Type[DataclassModel],
    binding_map: ColumnBindingMap,
    columns: Sequence[str],
) -> List[ScanTarget]:
    """Pick one scan target per result column, in column order."""

    model_field_list = model_fields(model)
    targets: List[ScanTarget] = []
    for column in columns:
        position = binding_map.get(column.lower())
        if position is None:
            targets.append(_DISCARD)
            continue
        if not 0 <= position < len(model_field_list):
            raise SchemaError(
                f"Column {column!r} is bound to field position {position}, but "
                f"{model.__name__} has {len(model_field_list)} fields."
            )
        field_name = model_field_list[position].name
        validate_field_codec(model, field_name)
        targets.append(_FieldTarget(model, field_name))
    return targets


def scan_one(
    cursor: CursorPort,
    destination: T,
    binding_map: Optional[ColumnBindingMap] = None,
) -> T:
    """Populate `destination` from the first row of `cursor`.

    Only the first row is read; rows after it are left in the cursor.

    Args:
        cursor: DB-API cursor positioned on a result set.
        destination: Dataclass instance to populate in place.
        binding_map: Column binding map; derived from the destination type
            when omitted.

    Returns:
        The populated `destination`.

    Raises:
        SchemaError: If the destination is not a dataclass instance or the
            cursor columns cannot be read.
        NoRowsError: If the result set is empty.
        RowScanError: If the row cannot be bound.
    """

    model = type(destination)
    require_dataclass_model(model)
    columns = cursor_columns(cursor)
    if binding_map is None:
        binding_map = bind_columns(model)
    targets = scan_targets(model, binding_map, columns)

    row = cursor.fetchone()
    if row is None:
        raise NoRowsError(f"No rows in result set for {model.__name__}.")

    values = _bind_row(targets, columns, row, row_index=0)
    for name, value in values.items():
        try:
            setattr(destination, name, value)
        except AttributeError as exc:
            raise RowScanError(
                f"Cannot assign {model.__name__}.{name}: {exc}", row_index=0
            ) from exc
    return destination


def scan_all(
    cursor: CursorPort,
    results: List[T],
    model: Type[T],
    binding_map: Optional[ColumnBindingMap] = None,
    *,
    on_row_error: RowErrorPolicyInput = RowErrorPolicy.SKIP,
) -> List[T]:
    """Append one new `model` instance per remaining cursor row to `results`.

    With `RowErrorPolicy.SKIP` a row that cannot be bound is dropped and
    logged, so the returned list can be a partial result. With
    `RowErrorPolicy.RAISE` the first failing row aborts the scan; rows already
    appended stay in `results`.

    Returns:
        The same `results` list.

    Raises:
        SchemaError: If `model` is not a dataclass type or the cursor columns
            cannot be read.
        RowScanError: Only under `RowErrorPolicy.RAISE`.
    """

    policy = RowErrorPolicy(on_row_error)
    require_dataclass_model(model)
    columns = cursor_columns(cursor)
    if binding_map is None:
        binding_map = bind_columns(model)
    targets = scan_targets(model, binding_map, columns)

    for row_index, row in enumerate(iter(cursor.fetchone, None)):
        try:
            values = _bind_row(targets, columns, row, row_index=row_index)
            obj = _new_instance(model, values, row_index=row_index)
        except RowScanError as exc:
            if policy is RowErrorPolicy.RAISE:
                raise
            logger.warning("Skipping row %d for %s: %s", row_index, model.__name__, exc)
            continue
        results.append(obj)
    return results


def _bind_row(
    targets: Sequence[ScanTarget],
    columns: Sequence[str],
    row: Row,
    *,
    row_index: int,
) -> Dict[str, Any]:
    if len(row) != len(targets):
        raise RowScanError(
            f"Row has {len(row)} values but the result set has {len(targets)} columns.",
            row_index=row_index,
        )

    values: Dict[str, Any] = {}
    for target, column, value in zip(targets, columns, row):
        try:
            target.write(values, value)
        except (TypeError, ValueError) as exc:
            raise RowScanError(
                f"Cannot scan column {column!r}: {exc}",
                row_index=row_index,
                column=column,
            ) from exc
    return values


def _new_instance(model: Type[T], values: Dict[str, Any], *, row_index: int) -> T:
    init_names = {field.name for field in fields(model) if field.init}
    init_values = {name: value for name, value in values.items() if name in init_names}
    try:
        obj = model(**init_values)
    except (TypeError, ValueError) as exc:
        raise RowScanError(
            f"Cannot build {model.__name__}: {exc}", row_index=row_index
        ) from exc

    for name, value in values.items():
        if name in init_names:
            continue
        try:
            setattr(obj, name, value)
        except AttributeError as exc:
            raise RowScanError(
                f"Cannot assign {model.__name__}.{name}: {exc}", row_index=row_index
            ) from exc
    return obj
