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
"""Tests for the pw_printf command line interface."""

import errno
import io
import os
from pathlib import Path
import tempfile
from typing import Tuple
import unittest
from unittest import mock

from pw_printf import __main__ as cli
from pw_printf.printf import FormatString


class TestMain(unittest.TestCase):
    """Tests running pw_printf from the command line."""

    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.temp = Path(self._temp_dir.name)

        self._environ = mock.patch.dict(
            os.environ,
            {'HOME': str(self.temp), 'PW_PROJECT_ROOT': str(self.temp)},
        )
        self._environ.start()
        os.environ.pop('PW_PRINTF_CONFIG_FILE', None)

        self._install = mock.patch('pw_printf.log.install')
        self.install = self._install.start()

    def tearDown(self) -> None:
        self._install.stop()
        self._environ.stop()
        self._temp_dir.cleanup()

    def _run(self, *argv: str) -> Tuple[int, bytes]:
        output = io.BytesIO()
        status = cli.main(list(argv), output)
        return status, output.getvalue()

    def test_format(self) -> None:
        self.assertEqual(self._run('%s-%d', 'a', '1'), (0, b'a-1'))

    def test_numeric_arguments(self) -> None:
        self.assertEqual(
            self._run('%d %x %.1f', '-0x1f', '255', '2.5e3'),
            (0, b'-31 ff 2500.0'),
        )

    def test_arguments_starting_with_dash(self) -> None:
        self.assertEqual(
            self._run('%s|%d|%s', '-x', '-0x1f', '--no-repeat'),
            (0, b'-x|-31|--no-repeat'),
        )

    def test_options_before_format_string(self) -> None:
        with self.assertLogs('pw_printf', level='WARNING'):
            status, output = self._run('--no-repeat', '%s', '-a', '-b')

        self.assertEqual((status, output), (0, b'-a'))

    def test_quote(self) -> None:
        self.assertEqual(self._run('%q', 'two words'), (0, b'"two words"'))

    def test_repeats_for_leftover_arguments(self) -> None:
        self.assertEqual(self._run('%s ', 'a', 'b', 'c'), (0, b'a b c '))

    def test_no_repeat(self) -> None:
        with self.assertLogs('pw_printf', level='WARNING') as logs:
            status, output = self._run('--no-repeat', '%s ', 'a', 'b')

        self.assertEqual((status, output), (0, b'a '))
        self.assertIn('1 argument(s) were not used: b', logs.output[0])

    def test_no_specifiers_formats_once(self) -> None:
        with self.assertLogs('pw_printf', level='WARNING'):
            status, output = self._run('hi', 'x', 'y')

        self.assertEqual((status, output), (0, b'hi'))

    def test_errno(self) -> None:
        status, output = self._run('--errno', str(errno.ENOENT), 'error: %m')

        self.assertEqual(status, 0)
        self.assertEqual(
            output, b'error: ' + os.strerror(errno.ENOENT).encode()
        )

    def test_format_error(self) -> None:
        with self.assertLogs('pw_printf', level='ERROR') as logs:
            status, output = self._run('%d', 'abc')

        self.assertEqual((status, output), (1, b''))
        self.assertIn(
            "bad argument #2 to 'format' (number expected, got str)",
            logs.output[0],
        )

    def test_missing_argument(self) -> None:
        with self.assertLogs('pw_printf', level='ERROR'):
            self.assertEqual(self._run('%s %s'), (1, b''))

    def test_max_specifier_length(self) -> None:
        with self.assertLogs('pw_printf', level='ERROR'):
            status, _ = self._run('--max-specifier-length', '3', '%10d', '1')

        self.assertEqual(status, 1)

    def test_config_file(self) -> None:
        config = self.temp / 'config.yaml'
        config.write_text('config_title: pw_printf\nrepeat_format: false\n')

        with self.assertLogs('pw_printf', level='WARNING'):
            status, output = self._run('--config', str(config), '%s', 'a', 'b')

        self.assertEqual((status, output), (0, b'a'))

    def test_command_line_overrides_project_file(self) -> None:
        (self.temp / '.pw_printf.yaml').write_text(
            'config_title: pw_printf\nlog_level: DEBUG\n'
        )

        self.assertEqual(self._run('--loglevel', 'ERROR', 'x'), (0, b'x'))
        self.install.assert_called_once_with(40, hide_timestamp=True)

    def test_invalid_project_file(self) -> None:
        (self.temp / '.pw_printf.yaml').write_text('log_level: DEBUG\n')

        with self.assertLogs('pw_printf', level='ERROR'):
            self.assertEqual(self._run('x'), (2, b''))

    def test_invalid_log_level(self) -> None:
        with self.assertLogs('pw_printf', level='ERROR') as logs:
            self.assertEqual(self._run('--loglevel', 'LOUD', 'x'), (2, b''))

        self.assertIn('not a valid log level', logs.output[0])

    def test_missing_config_file_argument(self) -> None:
        with mock.patch('sys.stderr', io.StringIO()):
            with self.assertRaises(SystemExit):
                self._run('--config', str(self.temp / 'missing.yaml'), 'x')


class TestFormatArguments(unittest.TestCase):
    """Tests format_arguments."""

    def test_repeat(self) -> None:
        self.assertEqual(
            cli.format_arguments(FormatString(b'%s=%s,'), ['a', '1', 'b', '2']),
            b'a=1,b=2,',
        )

    def test_no_repeat(self) -> None:
        with self.assertLogs('pw_printf', level='WARNING'):
            result = cli.format_arguments(
                FormatString(b'%s,'), ['a', 'b'], repeat=False
            )

        self.assertEqual(result, b'a,')

    def test_no_arguments(self) -> None:
        self.assertEqual(cli.format_arguments(FormatString(b'x\n'), []), b'x\n')

    def test_errno_only_format(self) -> None:
        with self.assertLogs('pw_printf', level='WARNING'):
            result = cli.format_arguments(
                FormatString(b'%m'), ['unused'], errno=0
            )

        self.assertEqual(result, os.strerror(0).encode())


if __name__ == '__main__':
    unittest.main()
