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
"""Formats printf-style strings with Python values as arguments.

The format(format_string, *args) function provides a simple way to format a
string. The FormatString class may also be used to format the same string with
several argument lists.

Arguments that the format string does not consume are returned with the
formatted string so callers can process them further.
"""

import logging
import math
import sys
from typing import Any, Iterator, List, NamedTuple, Optional, Sequence, Union

from pw_printf import values
from pw_printf.errors import (
    ArgumentCountError,
    ArgumentTypeError,
    MalformedSpecifierError,
)
from pw_printf.specifier import FormatSpec

_LOG = logging.getLogger(__package__)

# Specifiers, after * arguments are substituted, must be shorter than this.
MAX_SPECIFIER_LENGTH = 255


class FormattedString(NamedTuple):
    value: Any
    unused: List[Any]
    unused_count: int

    def ok(self) -> bool:
        """The format string consumed every argument."""
        return self.unused_count == 0


def current_errno() -> int:
    """Returns errno from the OSError being handled, or 0 if there is none."""
    err = sys.exc_info()[1]
    if isinstance(err, OSError) and err.errno is not None:
        return err.errno
    return 0


def _missing_argument(spec: FormatSpec) -> ArgumentCountError:
    return ArgumentCountError(
        f"not enough arguments for placeholder '{spec}' in format string"
    )


def _dynamic_argument(
    spec: FormatSpec, args: Sequence[Any], next_arg: int
) -> int:
    """Reads the value for a * width or precision."""
    if next_arg > len(args):
        raise _missing_argument(spec)

    value = args[next_arg - 1]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ArgumentTypeError(
            next_arg + 1, f'number expected, got {values.type_name(value)}'
        )

    if isinstance(value, float) and not math.isfinite(value):
        raise ArgumentTypeError(
            next_arg + 1, 'number has no integer representation'
        )

    return int(value)


class FormatString:
    """Represents a printf-style format string."""

    def __init__(
        self,
        format_string: Union[str, bytes, bytearray],
        max_specifier_length: int = MAX_SPECIFIER_LENGTH,
    ):
        if not values.is_string(format_string):
            raise TypeError(
                'format string must be str or bytes, not '
                + values.type_name(format_string)
            )

        self.format_string = format_string
        self.max_specifier_length = max_specifier_length
        self._template = values.to_bytes(format_string)

    def segments(self) -> Iterator[Union[bytes, FormatSpec]]:
        """Splits the format string into literal bytes and FormatSpecs.

        Segments are produced lazily, so errors from one specifier surface
        only after everything before it was handled. A %% escape ends a
        literal segment with a single %.
        """
        template = self._template
        head = 0

        while True:
            cursor = template.find(b'%', head)
            if cursor == -1:
                break

            if template[cursor + 1 : cursor + 2] == b'%':
                yield template[head : cursor + 1]
                head = cursor + 2
                continue

            if cursor != head:
                yield template[head:cursor]

            # FORMAT_SPEC matches any string that starts with %.
            match = FormatSpec.FORMAT_SPEC.match(template, cursor)
            assert match is not None
            head = match.end()
            yield FormatSpec.from_match(match)

        if head < len(template):
            yield template[head:]

    def format(
        self, *args: Any, errno: Optional[int] = None
    ) -> FormattedString:
        """Formats the string with the provided arguments.

        Args:
          *args: the values for the conversion specifiers
          errno: the error number described by %m; defaults to the errno of
              the OSError being handled, if any

        Returns:
          the formatted string with the arguments it did not use

        Raises:
          MalformedSpecifierError: the format string has an invalid specifier
          ArgumentCountError: there are not enough arguments
          ArgumentTypeError: an argument has the wrong type for its specifier
          ConversionError: an argument could not be rendered
        """
        pieces: List[bytes] = []
        next_arg = 0

        for segment in self.segments():
            if isinstance(segment, bytes):
                pieces.append(segment)
                continue

            spec = segment
            if spec.error is not None:
                raise MalformedSpecifierError(spec.error)

            width = None
            if spec.dynamic_width:
                next_arg += 1
                width = _dynamic_argument(spec, args, next_arg)

            precision = None
            if spec.dynamic_precision:
                next_arg += 1
                precision = _dynamic_argument(spec, args, next_arg)

            spec = spec.resolve(width, precision)

            if len(spec.specifier) >= self.max_specifier_length:
                raise MalformedSpecifierError(
                    'each placeholder must be less than '
                    f'{self.max_specifier_length} characters in format string '
                    f"'{spec}'"
                )

            if not spec.consumes_argument():
                pieces.append(
                    spec.format(current_errno() if errno is None else errno)
                )
                continue

            next_arg += 1
            if next_arg > len(args):
                raise _missing_argument(spec)

            pieces.append(spec.format(args[next_arg - 1], next_arg + 1))

        unused = list(args[next_arg:])
        if unused:
            _LOG.debug(
                '%d unused argument(s) after formatting %r',
                len(unused),
                self.format_string,
            )

        result = b''.join(pieces)
        if isinstance(self.format_string, str):
            return FormattedString(values.decode(result), unused, len(unused))

        return FormattedString(result, unused, len(unused))

    def __str__(self) -> str:
        if isinstance(self.format_string, str):
            return self.format_string
        return values.decode(self._template)

    def __repr__(self) -> str:
        return f'FormatString({self.format_string!r})'


def format(  # pylint: disable=redefined-builtin
    format_string: Any, *args: Any, errno: Optional[int] = None
) -> FormattedString:
    """Formats a printf-style string with the provided arguments.

    Args:
      format_string: the printf-style format string, as str or bytes
      *args: the values for the conversion specifiers
      errno: the error number described by %m

    Returns:
      the formatted string (str for a str format string, otherwise bytes) and
      the arguments that were not used; a format string that is not str or
      bytes is returned unchanged with all arguments unused
    """
    if not values.is_string(format_string):
        _LOG.debug(
            'Passing through %s format string', values.type_name(format_string)
        )
        return FormattedString(format_string, list(args), len(args))

    return FormatString(format_string).format(*args, errno=errno)
