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
"""pw_printf YAML preferences loader.

Preferences are loaded in this order, later files overriding earlier ones:

1. Built-in defaults.
2. ``$PW_PROJECT_ROOT/.pw_printf.yaml``
3. ``$HOME/.pw_printf.yaml``

If ``PW_PRINTF_CONFIG_FILE`` names a file, only that file is loaded on top of
the defaults. Each YAML document either nests the settings under a
``pw_printf`` key or declares ``config_title: pw_printf``:

::

   ---
   config_title: pw_printf
   max_specifier_length: 255
   repeat_format: true
   log_level: INFO
"""

import argparse
import enum
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from pw_printf.printf import MAX_SPECIFIER_LENGTH

_LOG = logging.getLogger(__package__)

CONFIG_TITLE = 'pw_printf'
ENVIRONMENT_VAR = 'PW_PRINTF_CONFIG_FILE'

_DEFAULT_PROJECT_FILE = Path('$PW_PROJECT_ROOT/.pw_printf.yaml')
_DEFAULT_USER_FILE = Path('$HOME/.pw_printf.yaml')

_DEFAULT_CONFIG: Dict[str, Any] = {
    'max_specifier_length': MAX_SPECIFIER_LENGTH,
    'repeat_format': True,
    'log_level': 'INFO',
}


class MissingConfigTitle(Exception):
    """Exception for when an existing YAML file is missing config_title."""


class Stage(enum.Enum):
    DEFAULT = 0
    PROJECT_FILE = 1
    USER_FILE = 2
    ENVIRONMENT_VAR_FILE = 3
    COMMAND_LINE = 4


def _expand(path: Path) -> Path:
    return Path(os.path.expandvars(str(path.expanduser())))


class PrintfPrefs:
    """pw_printf preferences storage class."""

    def __init__(
        self,
        project_file: Union[Path, bool] = _DEFAULT_PROJECT_FILE,
        user_file: Union[Path, bool] = _DEFAULT_USER_FILE,
        environment_var: Optional[str] = ENVIRONMENT_VAR,
    ) -> None:
        self._config: Dict[str, Any] = {}
        self._stages: Dict[str, Stage] = {}
        self.reset_config()

        if environment_var:
            environment_config = os.environ.get(environment_var)
            if environment_config:
                env_file_path = Path(environment_config)
                if not env_file_path.is_file():
                    raise FileNotFoundError(
                        f'Cannot load config file: {env_file_path}'
                    )
                self.load_config_file(
                    env_file_path, Stage.ENVIRONMENT_VAR_FILE
                )
                return

        if project_file and isinstance(project_file, Path):
            self.load_config_file(_expand(project_file), Stage.PROJECT_FILE)

        if user_file and isinstance(user_file, Path):
            self.load_config_file(_expand(user_file), Stage.USER_FILE)

    def reset_config(self) -> None:
        self._config = {}
        self._stages = {}
        self._update_config(_DEFAULT_CONFIG, Stage.DEFAULT)

    def _update_config(
        self, cfg: Optional[Dict[str, Any]], stage: Stage
    ) -> None:
        for key, value in (cfg or {}).items():
            if key == 'config_title':
                continue
            if key not in _DEFAULT_CONFIG:
                _LOG.warning('Ignoring unknown %s setting %r', stage.name, key)
                continue
            self._config[key] = value
            self._stages[key] = stage

    def _sections(self, file_path: Path) -> List[Dict[str, Any]]:
        """Returns the pw_printf settings from each document in a file."""
        sections = []

        for cfg in yaml.safe_load_all(file_path.read_text()):
            if not isinstance(cfg, dict):
                continue

            if isinstance(cfg.get(CONFIG_TITLE), dict):
                sections.append(cfg[CONFIG_TITLE])
            elif cfg.get('config_title') == CONFIG_TITLE:
                sections.append(cfg)
            else:
                raise MissingConfigTitle(
                    f'\n\nThe config file "{file_path}" is missing the '
                    f'expected "config_title: {CONFIG_TITLE}" setting.'
                )

        return sections

    def load_config_file(
        self, file_path: Path, stage: Stage = Stage.USER_FILE
    ) -> None:
        """Loads a config file, if it exists, on top of the current config."""
        if not file_path.is_file():
            return

        _LOG.debug('Loading %s from %s', CONFIG_TITLE, file_path)
        for section in self._sections(file_path):
            self._update_config(section, stage)

    def apply_command_line_args(self, args: argparse.Namespace) -> None:
        """Overrides settings with command line arguments that were given."""
        self._update_config(
            {
                key: value
                for key, value in vars(args).items()
                if key in _DEFAULT_CONFIG and value is not None
            },
            Stage.COMMAND_LINE,
        )

    def stage(self, key: str) -> Stage:
        """Which stage last set a setting."""
        return self._stages[key]

    @property
    def max_specifier_length(self) -> int:
        value = self._config['max_specifier_length']
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(
                'max_specifier_length must be a positive integer, not '
                f'{value!r}'
            )
        return value

    @property
    def repeat_format(self) -> bool:
        value = self._config['repeat_format']
        if not isinstance(value, bool):
            raise ValueError(
                f'repeat_format must be true or false, not {value!r}'
            )
        return value

    @property
    def log_level(self) -> int:
        value = self._config['log_level']
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        level = getattr(logging, str(value).upper(), None)
        if not isinstance(level, int):
            raise ValueError(f'"{value}" is not a valid log level')
        return level
