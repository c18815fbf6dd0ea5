#!/usr/bin/env python3
# Copyright 2024 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""Tests quoting strings for %q."""

import re
import unittest

from parameterized import parameterized  # type: ignore

import pw_printf
from pw_printf import quote

_NAMED = {
    ord('a'): 0x07,
    ord('b'): 0x08,
    ord('t'): 0x09,
    ord('n'): 0x0A,
    ord('v'): 0x0B,
    ord('f'): 0x0C,
    ord('r'): 0x0D,
    ord('"'): ord('"'),
    ord('\\'): ord('\\'),
}


def read_literal(quoted: bytes) -> bytes:
    """Reads a quoted string literal the way Lua does."""
    assert quoted[:1] == b'"' and quoted[-1:] == b'"', quoted
    body = quoted[1:-1]
    result = bytearray()
    index = 0

    while index < len(body):
        if body[index] != ord('\\'):
            result.append(body[index])
            index += 1
            continue

        index += 1
        if body[index] in _NAMED:
            result.append(_NAMED[body[index]])
            index += 1
            continue

        match = re.match(rb'[0-9]{1,3}', body[index:])
        assert match is not None, body[index:]
        result.append(int(match.group()))
        index += match.end()

    return bytes(result)


class TestQuoteUtf8(unittest.TestCase):
    """Tests that malformed UTF-8 is replaced and valid UTF-8 is kept."""

    @parameterized.expand(
        [
            ('ascii', b'\x40', '@'),
            ('continuation', b'\x80', '�'),
            ('two_bytes', b'\xc2\xa9', '©'),
            ('two_bytes_then_ascii', b'\xc2\x40', '�@'),
            ('two_bytes_invalid', b'\xc2\xc0', '�'),
            ('e0', b'\xe0\xa0\x80', 'ࠀ'),
            ('e0_then_ascii', b'\xe0\x40\x40', '�@@'),
            ('e0_third_ascii', b'\xe0\xa0\x40', '�@'),
            ('e0_third_invalid', b'\xe0\xa0\xc0', '�'),
            ('e1', b'\xe1\xb4\x81', 'ᴁ'),
            ('e1_then_ascii', b'\xe1\x40\x40', '�@@'),
            ('e1_third_ascii', b'\xe1\xb4\x40', '�@'),
            ('e1_third_invalid', b'\xe1\xb4\xc0', '�'),
            ('ed', b'\xed\x80\x80', '퀀'),
            ('ed_then_ascii', b'\xed\x40\x40', '�@@'),
            ('ed_third_ascii', b'\xed\x80\x40', '�@'),
            ('ed_third_invalid', b'\xed\x80\xc0', '�'),
            ('ef', b'\xef\xa4\x80', '豈'),
            ('ef_then_ascii', b'\xef\x40\x40', '�@@'),
            ('ef_third_ascii', b'\xef\xa4\x40', '�@'),
            ('ef_third_invalid', b'\xef\xa4\xc0', '�'),
            ('f0', b'\xf0\x90\x82\x82', '\U00010082'),
            ('f0_then_ascii', b'\xf0\x40\x40\x40', '�@@@'),
            ('f0_third_ascii', b'\xf0\x90\x40\x40', '�@@'),
            ('f0_fourth_ascii', b'\xf0\x90\x82\x40', '�@'),
            ('f0_fourth_invalid', b'\xf0\x90\x82\xc0', '�'),
        ]
    )
    def test_sequence(self, _, data: bytes, expected: str) -> None:
        self.assertEqual(
            quote.quote(b'a\xe3\x81\x82' + data + b'foo'),
            f'"aあ{expected}foo"'.encode(),
        )

    def test_lone_invalid_byte(self) -> None:
        self.assertEqual(quote.quote(b'\xff'), b'"\xef\xbf\xbd"')

    def test_each_invalid_byte_replaced(self) -> None:
        self.assertEqual(
            quote.quote(b'\xff\xfe'), b'"\xef\xbf\xbd\xef\xbf\xbd"'
        )


class TestQuoteEscapes(unittest.TestCase):
    """Tests escaping quotes, backslashes, and control characters."""

    def test_control_characters(self) -> None:
        self.assertEqual(
            quote.quote(b'\a\0\b\t\n\v\f\x0e\r\x0f987'),
            b'"\\a\\0\\b\\t\\n\\v\\f\\14\\r\\015987"',
        )

    def test_quote_and_backslash(self) -> None:
        self.assertEqual(quote.quote('"\\'), b'"\\"\\\\"')

    def test_delete(self) -> None:
        self.assertEqual(quote.quote('\x7f'), b'"\\127"')
        self.assertEqual(quote.quote('\x7f0'), b'"\\1270"')

    def test_escape_before_digit_is_padded(self) -> None:
        self.assertEqual(quote.quote('\x1b[0m'), b'"\\27[0m"')
        self.assertEqual(quote.quote('\x011'), b'"\\0011"')
        self.assertEqual(quote.quote('\x01'), b'"\\1"')

    def test_nul_before_digit(self) -> None:
        self.assertEqual(quote.quote('\x00'), b'"\\0"')
        self.assertEqual(quote.quote('\x00a'), b'"\\0a"')
        self.assertEqual(quote.quote('\x007'), b'"\\0007"')

    def test_named_escape_before_digit_is_not_padded(self) -> None:
        self.assertEqual(quote.quote('\n1'), b'"\\n1"')

    def test_multibyte_sequences_are_not_escaped(self) -> None:
        self.assertEqual(quote.quote('héllo ✓'), '"héllo ✓"'.encode())

    def test_empty(self) -> None:
        self.assertEqual(quote.quote(''), b'""')

    @parameterized.expand(
        [
            ('all_ascii', bytes(range(128))),
            ('digits_after_controls', b'\x0123\x7f9\x007\x1f0'),
            ('multibyte', 'héllo wörld ✓ \U0001f600'.encode()),
            ('quotes', b'say "hi" \\ bye\\'),
        ]
    )
    def test_read_back(self, _, data: bytes) -> None:
        self.assertEqual(read_literal(quote.quote(data)), data)


class TestQuoteValues(unittest.TestCase):
    """Tests quoting values that are not strings."""

    def test_nil(self) -> None:
        self.assertEqual(quote.quote(None), b'"nil"')

    def test_boolean(self) -> None:
        self.assertEqual(quote.quote(True), b'"true"')

    def test_number(self) -> None:
        self.assertEqual(quote.quote(12), b'"12"')

    def test_describe_hook(self) -> None:
        class Described:
            def __str__(self) -> str:
                return 'a\tb'

        self.assertEqual(quote.quote(Described()), b'"a\\tb"')


class TestQuoteModule(unittest.TestCase):
    """Tests reaching the quoting functions through the package."""

    def test_package_attribute_is_module(self) -> None:
        self.assertIs(pw_printf.quote, quote)
        self.assertTrue(callable(pw_printf.quote.quote_bytes))
        self.assertEqual(pw_printf.quote.quote_bytes(b'\x00'), b'"\\0"')


if __name__ == '__main__':
    unittest.main()
