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
"""Encodes values as double-quoted, backslash-escaped string literals.

Well-formed UTF-8 sequences are copied unchanged and malformed ones are
replaced with U+FFFD. The escapes are the ones understood by C and Lua string
literals, so the result can be read back as the original text.
"""

from typing import Any

from pw_printf import utf8
from pw_printf import values

_NAMED_ESCAPES = {
    0x00: b'\\0',
    0x07: b'\\a',
    0x08: b'\\b',
    0x09: b'\\t',
    0x0A: b'\\n',
    0x0B: b'\\v',
    0x0C: b'\\f',
    0x0D: b'\\r',
}

_DIGITS = frozenset(b'0123456789')


def _is_control(byte: int) -> bool:
    return byte < 0x20 or byte == 0x7F


def _escape_control(byte: int, next_byte: int) -> bytes:
    # A decimal escape followed by a digit must be three digits long, or the
    # digit would be read as part of the escape.
    if next_byte in _DIGITS:
        return b'\\%03d' % byte

    return _NAMED_ESCAPES.get(byte, b'\\%d' % byte)


def quote_bytes(data: bytes) -> bytes:
    """Quotes raw bytes; see quote()."""
    result = bytearray(b'"')
    index = 0

    while index < len(data):
        length = utf8.sequence_length(data, index)

        if length < 0:
            result += utf8.REPLACEMENT_CHARACTER
            index -= length
            continue

        if length > 1:
            result += data[index : index + length]
            index += length
            continue

        byte = data[index]
        index += 1

        if byte in b'"\\':
            result += b'\\' + bytes([byte])
        elif not _is_control(byte):
            result.append(byte)
        elif byte == 0x00 or byte not in _NAMED_ESCAPES:
            next_byte = data[index] if index < len(data) else 0
            result += _escape_control(byte, next_byte)
        else:
            result += _NAMED_ESCAPES[byte]

    result += b'"'
    return bytes(result)


def quote(value: Any) -> bytes:
    """Returns the display text of value as a quoted string literal."""
    return quote_bytes(values.to_display(value))
