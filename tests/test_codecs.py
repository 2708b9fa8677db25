from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from oauth2_sql.core.codecs import deserialize_column_value


class GrantType(str, Enum):
    AUTHORIZATION_CODE = "authorization_code"
    CLIENT_CREDENTIALS = "client_credentials"


@dataclass
class CodecRow:
    name: str = ""
    count: int = 0
    ratio: float = 0.0
    amount: Decimal = Decimal("0")
    enabled: bool = False
    raw: bytes = b""
    maybe: Optional[int] = None
    grant: GrantType = GrantType.AUTHORIZATION_CODE
    settings: dict[str, Any] = field(default_factory=dict)
    scopes: Any = field(default=None, metadata={"codec": "json"})
    anything: Any = None


class DeserializeColumnValueTests(unittest.TestCase):
    def test_scalar_conversions(self) -> None:
        cases = [
            ("name", 7, "7"),
            ("name", b"abc", "abc"),
            ("count", "42", 42),
            ("count", b" 5 ", 5),
            ("count", 3.0, 3),
            ("count", Decimal("8"), 8),
            ("ratio", "0.5", 0.5),
            ("ratio", 2, 2.0),
            ("amount", "12.30", Decimal("12.30")),
            ("amount", 1.5, Decimal("1.5")),
            ("enabled", 1, True),
            ("enabled", "f", False),
            ("enabled", "TRUE", True),
            ("raw", "hi", b"hi"),
            ("raw", memoryview(b"xy"), b"xy"),
            ("maybe", "9", 9),
        ]
        for field_name, value, expected in cases:
            with self.subTest(field=field_name, value=value):
                self.assertEqual(deserialize_column_value(CodecRow, field_name, value), expected)

    def test_none_is_preserved(self) -> None:
        self.assertIsNone(deserialize_column_value(CodecRow, "count", None))
        self.assertIsNone(deserialize_column_value(CodecRow, "maybe", None))

    def test_enum_and_json_values(self) -> None:
        self.assertIs(
            deserialize_column_value(CodecRow, "grant", "client_credentials"),
            GrantType.CLIENT_CREDENTIALS,
        )
        self.assertIs(
            deserialize_column_value(CodecRow, "grant", "AUTHORIZATION_CODE"),
            GrantType.AUTHORIZATION_CODE,
        )
        self.assertEqual(
            deserialize_column_value(CodecRow, "settings", '{"pkce": true}'), {"pkce": True}
        )
        self.assertEqual(
            deserialize_column_value(CodecRow, "scopes", b'["openid", "email"]'),
            ["openid", "email"],
        )

    def test_untyped_and_unknown_fields_pass_through(self) -> None:
        marker = object()
        self.assertIs(deserialize_column_value(CodecRow, "anything", marker), marker)
        self.assertIs(deserialize_column_value(CodecRow, "missing", marker), marker)

    def test_invalid_values_raise_value_error(self) -> None:
        cases = [
            ("count", "not-a-number"),
            ("count", 2.5),
            ("count", Decimal("1.1")),
            ("ratio", "fast"),
            ("amount", "n/a"),
            ("enabled", 2),
            ("enabled", "maybe"),
            ("name", object()),
            ("grant", "password"),
            ("settings", "{broken"),
        ]
        for field_name, value in cases:
            with self.subTest(field=field_name, value=value):
                with self.assertRaises(ValueError):
                    deserialize_column_value(CodecRow, field_name, value)


if __name__ == "__main__":
    unittest.main()
