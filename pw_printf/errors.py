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
"""Exceptions raised while formatting printf-style strings."""


class FormatError(Exception):
    """Base class for all errors raised by pw_printf formatting."""


class MalformedSpecifierError(FormatError):
    """A conversion specifier in the format string is not valid."""


class ArgumentCountError(FormatError):
    """A conversion specifier needs an argument that was not provided."""


class ArgumentTypeError(FormatError):
    """An argument cannot be converted as its specifier requires.

    The position counts the format string as argument #1, so the first
    substitutable argument is #2.
    """

    def __init__(self, position: int, detail: str):
        super().__init__(f"bad argument #{position} to 'format' ({detail})")
        self.position = position
        self.detail = detail


class ConversionError(FormatError):
    """Rendering an argument failed after it was successfully coerced."""
