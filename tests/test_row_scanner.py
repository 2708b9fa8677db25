from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from typing import Optional

from oauth2_sql import NoRowsError, RowErrorPolicy, RowScanError, SchemaError, scan_all, scan_one
from oauth2_sql.core.scanner import cursor_columns
from tests.db_api_test_helpers import FailingDescriptionCursor, FakeCursor


@dataclass
class PairRow:
    id: str = field(default="", metadata={"sql": "column:id"})
    note: str = "unset"


@dataclass
class CounterRow:
    name: str = field(default="", metadata={"sql": "column:name"})
    hits: int = field(default=0, metadata={"sql": "column:hits"})


@dataclass(frozen=True)
class FrozenRow:
    name: str = field(default="", metadata={"sql": "column:name"})


@dataclass
class RequiredRow:
    name: str = field(metadata={"sql": "column:name"})
    owner: str


@dataclass
class DerivedRow:
    name: str = field(default="", metadata={"sql": "column:name"})
    label: Optional[str] = field(default=None, init=False, metadata={"sql": "column:label"})


@dataclass(frozen=True)
class FrozenDerivedRow:
    name: str = field(default="", metadata={"sql": "column:name"})
    label: str = field(default="", init=False, metadata={"sql": "column:label"})


@dataclass
class BadCodecRow:
    name: str = field(default="", metadata={"sql": "column:name", "codec": "yaml"})


@dataclass
class EnumCodecWithoutEnumRow:
    name: str = field(default="", metadata={"sql": "column:name", "codec": "enum"})


class CursorColumnsTests(unittest.TestCase):
    def test_reads_names_from_description(self) -> None:
        self.assertEqual(cursor_columns(FakeCursor(["ID", "Name"])), ["ID", "Name"])

    def test_missing_or_failing_description_raises_schema_error(self) -> None:
        with self.assertRaises(SchemaError):
            cursor_columns(FakeCursor(None))
        with self.assertRaisesRegex(SchemaError, "result set is gone"):
            cursor_columns(FailingDescriptionCursor(["id"]))


class ScanOneTests(unittest.TestCase):
    def test_binds_by_name_and_discards_unmapped_columns(self) -> None:
        cursor = FakeCursor(["ID", "extra_col"], [("abc", "ignored")])
        row = PairRow()

        result = scan_one(cursor, row, {"id": 0})

        self.assertIs(result, row)
        self.assertEqual(row, PairRow(id="abc", note="unset"))

    def test_column_order_does_not_matter(self) -> None:
        cursor = FakeCursor(["Hits", "unused", "NAME"], [("12", None, "home")])

        row = scan_one(cursor, CounterRow())

        self.assertEqual(row, CounterRow(name="home", hits=12))

    def test_empty_cursor_raises_no_rows(self) -> None:
        with self.assertRaises(NoRowsError):
            scan_one(FakeCursor(["id"], []), PairRow())

    def test_reads_only_the_first_of_several_rows(self) -> None:
        cursor = FakeCursor(["id"], [("first",), ("second",), ("third",)])

        row = scan_one(cursor, PairRow())

        self.assertEqual(row.id, "first")
        self.assertEqual(cursor.fetch_calls, 1)
        self.assertEqual(cursor.remaining, 2)

    def test_scan_failure_propagates(self) -> None:
        cursor = FakeCursor(["name", "hits"], [("home", "lots")])

        with self.assertRaises(RowScanError) as ctx:
            scan_one(cursor, CounterRow())

        self.assertEqual(ctx.exception.row_index, 0)
        self.assertEqual(ctx.exception.column, "hits")

    def test_row_arity_mismatch_is_a_scan_failure(self) -> None:
        cursor = FakeCursor(["id", "note"], [("only-one",)])

        with self.assertRaisesRegex(RowScanError, "1 values but the result set has 2"):
            scan_one(cursor, PairRow())

    def test_frozen_destination_is_a_scan_failure(self) -> None:
        with self.assertRaises(RowScanError):
            scan_one(FakeCursor(["name"], [("x",)]), FrozenRow())

    def test_non_dataclass_destination_raises_schema_error(self) -> None:
        with self.assertRaises(SchemaError):
            scan_one(FakeCursor(["id"], [("x",)]), object())  # type: ignore[arg-type]
        with self.assertRaises(SchemaError):
            scan_one(FakeCursor(["id"], [("x",)]), PairRow)  # type: ignore[arg-type]

    def test_binding_position_out_of_range_raises_schema_error(self) -> None:
        with self.assertRaises(SchemaError):
            scan_one(FakeCursor(["id"], [("x",)]), PairRow(), {"id": 5})

    def test_column_listing_failure_wins_over_empty_result(self) -> None:
        with self.assertRaises(SchemaError):
            scan_one(FakeCursor(None, []), PairRow())


class ScanAllTests(unittest.TestCase):
    def test_appends_one_element_per_row(self) -> None:
        cursor = FakeCursor(["name", "hits"], [("a", 1), ("b", 2)])
        results: list[CounterRow] = [CounterRow(name="existing")]

        returned = scan_all(cursor, results, CounterRow)

        self.assertIs(returned, results)
        self.assertEqual(
            results,
            [CounterRow(name="existing"), CounterRow("a", 1), CounterRow("b", 2)],
        )

    def test_empty_cursor_yields_no_elements(self) -> None:
        self.assertEqual(scan_all(FakeCursor(["name"], []), [], CounterRow), [])

    def test_failing_row_is_skipped_and_order_preserved(self) -> None:
        rows = [("r1", 1), ("r2", 2), ("r3", "broken"), ("r4", 4), ("r5", 5)]
        cursor = FakeCursor(["name", "hits"], rows)

        with self.assertLogs("oauth2_sql.core.scanner", level="WARNING") as logs:
            results = scan_all(cursor, [], CounterRow, {"name": 0, "hits": 1})

        self.assertEqual([r.name for r in results], ["r1", "r2", "r4", "r5"])
        self.assertEqual([r.hits for r in results], [1, 2, 4, 5])
        self.assertEqual(len(logs.records), 1)
        self.assertIn("Skipping row 2", logs.output[0])

    def test_raise_policy_stops_at_first_failing_row(self) -> None:
        rows = [("r1", 1), ("r2", 2), ("r3", "broken"), ("r4", 4)]
        cursor = FakeCursor(["name", "hits"], rows)
        results: list[CounterRow] = []

        with self.assertRaises(RowScanError) as ctx:
            scan_all(cursor, results, CounterRow, on_row_error=RowErrorPolicy.RAISE)

        self.assertEqual(ctx.exception.row_index, 2)
        self.assertEqual([r.name for r in results], ["r1", "r2"])
        self.assertEqual(cursor.remaining, 1)

    def test_policy_accepts_string_value(self) -> None:
        cursor = FakeCursor(["name", "hits"], [("r1", "broken")])
        with self.assertRaises(RowScanError):
            scan_all(cursor, [], CounterRow, on_row_error="raise")

    def test_missing_required_field_drops_row(self) -> None:
        cursor = FakeCursor(["name"], [("a",), ("b",)])

        with self.assertLogs("oauth2_sql.core.scanner", level="WARNING"):
            results = scan_all(cursor, [], RequiredRow)

        self.assertEqual(results, [])

    def test_required_fields_are_passed_to_the_constructor(self) -> None:
        cursor = FakeCursor(["name", "owner"], [("a", "ops")])

        results = scan_all(cursor, [], RequiredRow, {"name": 0, "owner": 1})

        self.assertEqual(results, [RequiredRow(name="a", owner="ops")])

    def test_non_init_fields_are_assigned_after_construction(self) -> None:
        cursor = FakeCursor(["label", "name"], [("L", "n")])

        results = scan_all(cursor, [], DerivedRow)

        self.assertEqual(results[0].name, "n")
        self.assertEqual(results[0].label, "L")

    def test_non_dataclass_model_raises_schema_error(self) -> None:
        with self.assertRaises(SchemaError):
            scan_all(FakeCursor(["id"], [("x",)]), [], dict)  # type: ignore[arg-type]

    def test_column_listing_failure_propagates(self) -> None:
        with self.assertRaises(SchemaError):
            scan_all(FailingDescriptionCursor(["id"], [("x",)]), [], PairRow)

    def test_frozen_non_init_field_drops_only_that_row(self) -> None:
        cursor = FakeCursor(["name", "label"], [("a", "L"), ("b", None)])

        with self.assertLogs("oauth2_sql.core.scanner", level="WARNING") as logs:
            results = scan_all(cursor, [], FrozenDerivedRow)

        self.assertEqual(results, [])
        self.assertEqual(len(logs.records), 2)
        self.assertEqual(cursor.remaining, 0)

    def test_frozen_non_init_field_raises_under_raise_policy(self) -> None:
        cursor = FakeCursor(["name", "label"], [("a", "L")])

        with self.assertRaises(RowScanError) as ctx:
            scan_all(cursor, [], FrozenDerivedRow, on_row_error=RowErrorPolicy.RAISE)

        self.assertEqual(ctx.exception.row_index, 0)

    def test_unsupported_codec_raises_schema_error_before_scanning(self) -> None:
        for model in (BadCodecRow, EnumCodecWithoutEnumRow):
            with self.subTest(model=model.__name__):
                cursor = FakeCursor(["name"], [("a",), ("b",)])
                with self.assertRaises(SchemaError):
                    scan_all(cursor, [], model)
                self.assertEqual(cursor.fetch_calls, 0)

    def test_unsupported_codec_on_unbound_column_is_ignored(self) -> None:
        cursor = FakeCursor(["other"], [("a",)])

        self.assertEqual(scan_all(cursor, [], BadCodecRow), [BadCodecRow()])


if __name__ == "__main__":
    unittest.main()
