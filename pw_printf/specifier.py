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
"""Parses and renders a single printf-style conversion specifier.

Supported grammar: ``%[flags][width][.precision][length]type``

- Flags (zero or more)
  - ``-``: Left-justify within the field width.
  - ``+``: Always print a sign for signed conversions.
  - `` `` (space): Print a space where a ``+`` sign would go.
  - ``#``: Alternative form. ``o`` gets a leading ``0``, nonzero ``x``/``X``
    get ``0x``/``0X``, floating point conversions always print a radix point.
  - ``0``: Pad numbers with zeros after the sign or prefix. Ignored with ``-``
    and, for integer conversions, when a precision is given.
  - ``I`` and ``'``: glibc locale flags; accepted and ignored.
- Width: digits, or ``*`` to take it from the argument list. A negative
  dynamic width left-justifies.
- Precision: ``.`` followed by digits (nothing means 0), or ``.*``. A
  negative dynamic precision is treated as absent.
- Length: one of ``h l j z t L``. Accepted and ignored; integers are 64-bit.
- Type: ``d i o u x X e E f F g G a A c s p q m``.

``%q`` must not have flags, width, precision or length. ``%m`` prints the
description of an errno value and takes no argument.
"""

import math
import os
import re
from typing import Any, Callable, Dict, Optional

from pw_printf import quote
from pw_printf import values
from pw_printf.errors import (
    ArgumentTypeError,
    ConversionError,
    MalformedSpecifierError,
)

_UINT64_MASK = (1 << 64) - 1

_HEX_FLOAT = re.compile(r'0x([01])\.([0-9a-f]+)p([+-][0-9]+)')
_HEX_FLOAT_DIGITS = 13  # 52-bit mantissa


class FormatSpec:
    """Represents a conversion specifier parsed from a printf-style string."""

    # Matches a specifier at a '%'. The type group is empty at the end of the
    # string and may hold any byte; FormatSpec.error reports bad types.
    FORMAT_SPEC = re.compile(
        rb'%(?P<flags>[#I0\- +\']*)'
        rb'(?P<width>[0-9]+|\*)?'
        rb'(?P<precision>\.(?:[0-9]+|\*)?)?'
        rb'(?P<length>[hljztL])?'
        rb'(?P<type>.?)',
        re.DOTALL,
    )

    TYPES = frozenset('diouxXeEfFgGaAcspqm')

    # Conversion specifiers by argument type.
    SIGNED_INT = frozenset('di')
    UNSIGNED_INT = frozenset('ouxX')
    FLOATING_POINT = frozenset('eEfFgGaA')

    @classmethod
    def from_string(cls, format_specifier: str) -> 'FormatSpec':
        """Creates a FormatSpec from a str with a single format specifier."""
        match = cls.FORMAT_SPEC.fullmatch(values.encode(format_specifier))

        if not match:
            raise ValueError(
                f'{format_specifier!r} is not a single format specifier'
            )

        return cls.from_match(match)

    @classmethod
    def from_match(cls, re_match: re.Match) -> 'FormatSpec':
        """Constructs a FormatSpec from an re.Match object for FORMAT_SPEC."""
        return cls(
            flags=re_match.group('flags').decode(),
            width=(re_match.group('width') or b'').decode(),
            precision=(re_match.group('precision') or b'').decode(),
            length=(re_match.group('length') or b'').decode(),
            type_=re_match.group('type').decode('ascii', 'backslashreplace'),
        )

    def __init__(
        self,
        flags: str = '',
        width: str = '',
        precision: str = '',
        length: str = '',
        type_: str = '',
    ):
        self.flags = flags
        self.width = width  # '', digits, '*', or a resolved signed integer
        self.precision = precision  # '', '.', '.digits', '.*', or resolved
        self.length = length
        self.type = type_

        self.specifier = ''.join(
            ['%', self.flags, self.width, self.precision, self.length]
        )
        self.specifier += self.type

        self.error: Optional[str] = None
        if not self.type:
            self.error = (
                'unsupported type field at end of format string '
                f"'{self.specifier}'"
            )
        elif self.type not in self.TYPES:
            self.error = (
                f"unsupported type field at '{self.type}' in format string "
                f"'{self.specifier}'"
            )
        elif self.type == 'q' and self.specifier != '%q':
            self.error = "specifier '%q' cannot have modifiers"

        self._formatters: Dict[str, Callable[[Any, int], bytes]] = {
            'd': self._format_integer,
            'i': self._format_integer,
            'o': self._format_integer,
            'u': self._format_integer,
            'x': self._format_integer,
            'X': self._format_integer,
            'e': self._format_float,
            'E': self._format_float,
            'f': self._format_float,
            'F': self._format_float,
            'g': self._format_float,
            'G': self._format_float,
            'a': self._format_hex_float,
            'A': self._format_hex_float,
            'c': self._format_char,
            's': self._format_string,
            'p': self._format_pointer,
            'q': self._format_quoted,
            'm': self._format_errno,
        }

    @property
    def dynamic_width(self) -> bool:
        return self.width == '*'

    @property
    def dynamic_precision(self) -> bool:
        return self.precision == '.*'

    def consumes_argument(self) -> bool:
        """True if the conversion itself, not counting *, takes an argument."""
        return self.type != 'm'

    def resolve(
        self, width: Optional[int] = None, precision: Optional[int] = None
    ) -> 'FormatSpec':
        """Returns a copy with * width and precision replaced by values."""
        return FormatSpec(
            self.flags,
            str(width) if self.dynamic_width else self.width,
            f'.{precision}' if self.dynamic_precision else self.precision,
            self.length,
            self.type,
        )

    def field_width(self) -> int:
        return abs(int(self.width or '0'))

    def left_justified(self) -> bool:
        return '-' in self.flags or self.width.startswith('-')

    def precision_value(self) -> Optional[int]:
        """The precision, or None if it is absent or negative."""
        if not self.precision:
            return None

        precision = int(self.precision[1:] or '0')
        return precision if precision >= 0 else None

    def format(self, value: Any = None, position: int = 0) -> bytes:
        """Converts value according to this specifier.

        Args:
          value: the argument bound to this specifier, or the errno number
              for %m
          position: the argument's position, used in error messages

        Raises:
          MalformedSpecifierError: this specifier is not valid
          ArgumentTypeError: value cannot be coerced for this conversion
          ConversionError: rendering the coerced value failed
        """
        if self.error is not None:
            raise MalformedSpecifierError(self.error)

        if self.dynamic_width or self.dynamic_precision:
            raise ValueError(f'{self.specifier} has unresolved * arguments')

        try:
            return self._formatters[self.type](value, position)
        except (OverflowError, ValueError, MemoryError) as err:
            raise ConversionError(
                f"failed to format '{self.specifier}': "
                f'{err or type(err).__name__}'
            ) from err

    def _justify(
        self, prefix: bytes, body: bytes, zero_pad: bool = False
    ) -> bytes:
        """Pads prefix + body to the field width.

        Zero padding goes between the prefix (sign and 0x) and the body.
        """
        fill = self.field_width() - len(prefix) - len(body)
        if fill <= 0:
            return prefix + body

        if self.left_justified():
            return prefix + body + b' ' * fill

        if zero_pad:
            return prefix + b'0' * fill + body

        return b' ' * fill + prefix + body

    def _zero_pad(self) -> bool:
        return '0' in self.flags and not self.left_justified()

    def _sign(self, negative: bool) -> bytes:
        if negative:
            return b'-'
        if '+' in self.flags:
            return b'+'
        if ' ' in self.flags:
            return b' '
        return b''

    def _format_integer(self, value: Any, position: int) -> bytes:
        if isinstance(value, bool):
            number = int(value)
        else:
            number = values.checked_integer(value, position)

        if self.type in self.SIGNED_INT:
            sign = self._sign(number < 0)
            number = abs(number)
        else:
            sign = b''
            number &= _UINT64_MASK

        digits = (b'%' + self.type.replace('i', 'd').encode()) % number

        precision = self.precision_value()
        if precision is not None:
            digits = b'' if precision == 0 and number == 0 else digits
            digits = digits.rjust(precision, b'0')

        prefix = sign
        if '#' in self.flags:
            if self.type == 'o' and not digits.startswith(b'0'):
                digits = b'0' + digits
            elif self.type in 'xX' and number != 0:
                prefix += b'0' + self.type.encode()

        return self._justify(
            prefix, digits, self._zero_pad() and precision is None
        )

    def _python_float_spec(
        self, allow_zero_pad: bool, type_: Optional[str] = None
    ) -> bytes:
        """Builds an equivalent Python %-format spec for a float conversion."""
        flags = ''.join(f for f in self.flags if f in '#+ ')
        if self.left_justified():
            flags += '-'
        elif allow_zero_pad and self._zero_pad():
            flags += '0'

        precision = self.precision_value()
        return ''.join(
            [
                '%',
                flags,
                str(self.field_width()) if self.width else '',
                '' if precision is None else f'.{precision}',
                type_ or self.type,
            ]
        ).encode()

    def _format_float(self, value: Any, position: int) -> bytes:
        number = values.checked_float(value, position)

        # Python's %-formatting matches C for e, f, and g conversions, except
        # that it zero pads infinity and NaN.
        return self._python_float_spec(math.isfinite(number)) % number

    def _format_hex_float(self, value: Any, position: int) -> bytes:
        number = values.checked_float(value, position)

        if not math.isfinite(number):
            text_type = 'F' if self.type == 'A' else 'f'
            return self._python_float_spec(False, text_type) % number

        sign = self._sign(math.copysign(1.0, number) < 0)
        body = _hex_float_body(
            abs(number), self.precision_value(), '#' in self.flags
        )

        prefix = b'0x'
        if self.type == 'A':
            prefix, body = prefix.upper(), body.upper()

        return self._justify(sign + prefix, body, self._zero_pad())

    def _format_char(self, value: Any, position: int) -> bytes:
        if values.is_string(value):
            data = values.to_bytes(value)
            if len(data) > 1:
                raise ArgumentTypeError(position, 'string length <=1 expected')
            number = data[0] if data else 0
        else:
            number = values.checked_integer(value, position)

        return self._justify(b'', bytes([number & 0xFF]))

    def _format_string(self, value: Any, unused_position: int) -> bytes:
        data = values.to_display(value)

        precision = self.precision_value()
        if precision is not None:
            data = data[:precision]

        return self._justify(b'', data)

    def _format_pointer(self, value: Any, unused_position: int) -> bytes:
        address = values.identity(value)
        if address == 0:
            return self._justify(b'', b'(nil)')

        return self._justify(
            self._sign(False) + b'0x', b'%x' % address, self._zero_pad()
        )

    def _format_quoted(self, value: Any, unused_position: int) -> bytes:
        return quote.quote(value)

    def _format_errno(self, value: Any, unused_position: int) -> bytes:
        return values.encode(os.strerror(value or 0))

    def __str__(self) -> str:
        return self.specifier

    def __repr__(self) -> str:
        return f'FormatSpec({self.specifier!r})'


def _hex_float_body(
    number: float, precision: Optional[int], alt: bool
) -> bytes:
    """Formats a non-negative finite float as C99 %a without the 0x prefix."""
    match = _HEX_FLOAT.fullmatch(number.hex())
    assert match is not None, f'Unexpected float.hex() for {number}'

    lead = int(match.group(1))
    fraction = match.group(2).ljust(_HEX_FLOAT_DIGITS, '0')
    exponent = int(match.group(3))

    if precision is None:
        fraction = fraction.rstrip('0')
    elif precision >= _HEX_FLOAT_DIGITS:
        fraction = fraction.ljust(precision, '0')
    else:
        # Round half to even, letting a carry increment the leading digit.
        mantissa = (lead << 4 * _HEX_FLOAT_DIGITS) | int(fraction, 16)
        shift = 4 * (_HEX_FLOAT_DIGITS - precision)
        mantissa, remainder = divmod(mantissa, 1 << shift)
        half = 1 << (shift - 1)
        if remainder > half or (remainder == half and mantissa & 1):
            mantissa += 1

        lead = mantissa >> 4 * precision
        fraction = ''
        if precision:
            fraction = f'{mantissa & ((1 << 4 * precision) - 1):0{precision}x}'

    point = '.' if fraction or alt else ''
    return f'{lead:x}{point}{fraction}p{exponent:+d}'.encode()
