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
"""Tools for configuring Python logging for the pw_printf command."""

import logging
from pathlib import Path
import sys
from typing import Callable, NamedTuple, Optional, Union


class _LogLevel(NamedTuple):
    level: int
    color: str
    ascii: str


def _make_color(*codes: int) -> Callable[[str], str]:
    start = ''.join(f'\033[{code}m' for code in codes)
    reset = '\033[0m'

    return lambda msg: f'{start}{msg}{reset}'


_COLORS = {
    'bold_red': _make_color(30, 41),
    'red': _make_color(31, 1),
    'yellow': _make_color(33, 1),
    'magenta': _make_color(35, 1),
    'blue': _make_color(34, 1),
    'black_on_white': _make_color(30, 47),
}

# Shorten all the log levels to 3 characters for column-aligned logs.
_LOG_LEVELS = (
    _LogLevel(logging.CRITICAL, 'bold_red', 'CRT'),
    _LogLevel(logging.ERROR,    'red',      'ERR'),
    _LogLevel(logging.WARNING,  'yellow',   'WRN'),
    _LogLevel(logging.INFO,     'magenta',  'INF'),
    _LogLevel(logging.DEBUG,    'blue',     'DBG'),
)  # yapf: disable

_STDERR_HANDLER = logging.StreamHandler()


def _setup_handler(
    handler: logging.Handler, formatter: logging.Formatter, level: int
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logging.getLogger().addHandler(handler)


def install(
    level: int = logging.INFO,
    use_color: Optional[bool] = None,
    hide_timestamp: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Configures the root logger with the pw_printf log format."""
    if use_color is None:
        use_color = sys.stderr.isatty()

    def colorize(color: str) -> Callable[[str], str]:
        return _COLORS[color] if use_color else str

    if hide_timestamp:
        timestamp_fmt = ''
    else:
        timestamp_fmt = colorize('black_on_white')('%(asctime)s') + ' '

    formatter = logging.Formatter(
        timestamp_fmt + '%(levelname)s %(message)s', '%Y%m%d %H:%M:%S'
    )

    # Let the handlers do the filtering.
    logging.getLogger().setLevel(1)

    _setup_handler(_STDERR_HANDLER, formatter, level)

    if log_file:
        _setup_handler(logging.FileHandler(log_file), formatter, level)
        # Since we're using a file, filter logs out of the stderr handler.
        _STDERR_HANDLER.setLevel(logging.CRITICAL + 1)

    for log_level in _LOG_LEVELS:
        logging.addLevelName(
            log_level.level, colorize(log_level.color)(log_level.ascii)
        )
