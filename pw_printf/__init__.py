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
"""printf-style string formatting with %q quoting and %m errno messages."""

from pw_printf.errors import (
    ArgumentCountError,
    ArgumentTypeError,
    ConversionError,
    FormatError,
    MalformedSpecifierError,
)
from pw_printf.printf import (
    MAX_SPECIFIER_LENGTH,
    FormatString,
    FormattedString,
    format,  # pylint: disable=redefined-builtin
)
from pw_printf.specifier import FormatSpec
