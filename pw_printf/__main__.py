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
"""Formats a printf-style string with command line arguments.

The formatted string is written to stdout. Numeric conversions accept
arguments that look like numbers, such as 42, -0x1f or 2.5e3.

Like printf(1), arguments left over after formatting are formatted with the
format string again until they are used up, unless --no-repeat is given or a
pass uses no arguments.

example:
  python -m pw_printf "Hello, %s! %5.1f%%" world 99.44
  python -m pw_printf "%s=%q " a 1 b "two words"
"""

import argparse
import logging
import os
from pathlib import Path
import sys
from typing import BinaryIO, List, Optional, Sequence

from pw_printf import log
from pw_printf.errors import FormatError
from pw_printf.prefs import MissingConfigTitle, PrintfPrefs, Stage
from pw_printf.printf import FormatString

_LOG = logging.getLogger('pw_printf')


def _existing_file(arg: str) -> Path:
    path = Path(arg)
    if path.is_file():
        return path

    raise argparse.ArgumentTypeError(f'"{path}" is not a file')


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    """Parses and return command line arguments."""

    parser = argparse.ArgumentParser(
        prog='pw_printf',
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '--no-repeat',
        dest='repeat_format',
        action='store_const',
        const=False,
        help='Format the string once, even if arguments are left over.',
    )
    parser.add_argument(
        '--config',
        type=_existing_file,
        help='YAML preferences file applied on top of the other ones.',
    )
    parser.add_argument(
        '--loglevel',
        dest='log_level',
        help='Log level for messages printed to stderr. (default: INFO)',
    )
    parser.add_argument(
        '--max-specifier-length',
        type=int,
        help=(
            'Reject conversion specifiers at least this long. (default: 255)'
        ),
    )
    parser.add_argument(
        '--errno',
        type=int,
        help='The error number described by %%m. (default: 0)',
    )
    parser.add_argument('format_string', help='The printf-style format.')
    # Everything after the format string is an argument, even if it starts
    # with a dash.
    parser.add_argument(
        'arguments',
        nargs=argparse.REMAINDER,
        help='Values for the conversion specifiers.',
    )

    return parser.parse_args(argv)


def format_arguments(
    format_string: FormatString,
    arguments: Sequence[str],
    repeat: bool = True,
    errno: Optional[int] = None,
) -> bytes:
    """Formats arguments, reusing the format string for leftover arguments."""
    pieces: List[bytes] = []
    remaining = list(arguments)

    while True:
        result = format_string.format(*remaining, errno=errno)
        pieces.append(result.value)

        if (
            not repeat
            or not result.unused
            or result.unused_count == len(remaining)
        ):
            break

        remaining = result.unused

    if result.unused:
        _LOG.warning(
            '%d argument(s) were not used: %s',
            result.unused_count,
            ' '.join(result.unused),
        )

    return b''.join(pieces)


def _load_prefs(args: argparse.Namespace) -> PrintfPrefs:
    prefs = PrintfPrefs()
    if args.config:
        prefs.load_config_file(args.config, Stage.COMMAND_LINE)
    prefs.apply_command_line_args(args)
    return prefs


def main(
    argv: Optional[Sequence[str]] = None, output: Optional[BinaryIO] = None
) -> int:
    args = _parse_args(argv)

    try:
        prefs = _load_prefs(args)
        log.install(prefs.log_level, hide_timestamp=True)
        format_string = FormatString(
            os.fsencode(args.format_string), prefs.max_specifier_length
        )
        repeat = prefs.repeat_format
    except (FileNotFoundError, MissingConfigTitle, ValueError) as err:
        log.install(hide_timestamp=True)
        _LOG.error('Invalid pw_printf preferences: %s', err)
        return 2

    try:
        text = format_arguments(
            format_string, args.arguments, repeat, args.errno
        )
    except FormatError as err:
        _LOG.error('%s', err)
        return 1

    if output is None:
        output = sys.stdout.buffer

    output.write(text)
    output.flush()
    return 0


if __name__ == '__main__':
    sys.exit(main())
