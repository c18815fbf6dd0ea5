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
"""Coerces Python values for printf-style conversions.

Strings are handled as UTF-8 bytes. str values are encoded with the
surrogateescape error handler so text decoded from arbitrary bytes the same
way survives formatting unchanged.

Objects other than None, booleans, numbers and strings are displayed through
their describe hook, a __str__ method defined by their class. Without one they
display as "<type name>: 0x<identity>".
"""

import re
from typing import Any, Optional, Union

from pw_printf.errors import ArgumentTypeError

ENCODING = 'utf-8'
ENCODING_ERRORS = 'surrogateescape'

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_DECIMAL = re.compile(rb'[+-]?[0-9]+')
_HEXADECIMAL = re.compile(rb'([+-]?)0[xX]([0-9a-fA-F]+)')
_FLOAT = re.compile(rb'[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')

_STRING_TYPES = (str, bytes, bytearray)


def encode(text: str) -> bytes:
    return text.encode(ENCODING, ENCODING_ERRORS)


def decode(data: bytes) -> str:
    return data.decode(ENCODING, ENCODING_ERRORS)


def is_string(value: Any) -> bool:
    return isinstance(value, _STRING_TYPES)


def to_bytes(value: Union[str, bytes, bytearray]) -> bytes:
    if isinstance(value, str):
        return encode(value)
    return bytes(value)


def type_name(value: Any) -> str:
    return type(value).__name__


def has_describe_hook(value: Any) -> bool:
    """True if the value's class defines its own __str__."""
    return type(value).__str__ is not object.__str__


def identity(value: Any) -> int:
    """Returns an address-like token for the value; 0 for values without one.

    None, booleans and numbers are values rather than objects with an
    identity, so they all report 0 (printed by %p as "(nil)").
    """
    if value is None or isinstance(value, (bool, int, float)):
        return 0
    return id(value)


def to_display(value: Any) -> bytes:
    """Converts any value to the bytes printed for it by %s and %q."""
    if value is None:
        return b'nil'

    if isinstance(value, bool):
        return b'true' if value else b'false'

    if isinstance(value, (int, float)):
        return encode(str(value))

    if is_string(value):
        return to_bytes(value)

    if has_describe_hook(value):
        return encode(str(value))

    return encode(f'{type_name(value)}: 0x{identity(value):x}')


def string_to_number(data: bytes) -> Optional[Union[int, float]]:
    """Parses a decimal, 0x-prefixed hexadecimal, or floating point number.

    Surrounding whitespace is ignored. Returns None if data is not a number.
    """
    text = data.strip()

    if _DECIMAL.fullmatch(text):
        return int(text)

    match = _HEXADECIMAL.fullmatch(text)
    if match:
        sign, digits = match.groups()
        number = int(digits, 16)
        return -number if sign == b'-' else number

    if _FLOAT.fullmatch(text):
        return float(text)

    return None


def to_number(value: Any) -> Optional[Union[int, float]]:
    """Returns value as an int or float, or None if it is not numeric."""
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return value

    if is_string(value):
        return string_to_number(to_bytes(value))

    return None


def checked_integer(value: Any, position: int) -> int:
    """Converts value to a signed 64-bit integer or raises ArgumentTypeError.

    Floats are accepted if they hold an integral value.
    """
    number = to_number(value)

    if number is None:
        raise ArgumentTypeError(
            position, f'number expected, got {type_name(value)}'
        )

    if isinstance(number, float):
        if not number.is_integer():
            raise ArgumentTypeError(
                position, 'number has no integer representation'
            )
        number = int(number)

    if not INT64_MIN <= number <= INT64_MAX:
        raise ArgumentTypeError(
            position, 'number has no integer representation'
        )

    return number


def checked_float(value: Any, position: int) -> float:
    """Converts value to a float or raises ArgumentTypeError."""
    number = to_number(value)

    if number is None:
        raise ArgumentTypeError(
            position, f'number expected, got {type_name(value)}'
        )

    try:
        return float(number)
    except OverflowError:
        raise ArgumentTypeError(
            position, 'number has no float representation'
        ) from None
