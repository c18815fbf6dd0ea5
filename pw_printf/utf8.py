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
"""Classifies UTF-8 byte sequences.

The rules follow table 3-7, "Well-Formed UTF-8 Byte Sequences", of the Unicode
Standard core specification. Malformed sequences report how many bytes to skip
so that decoding resumes at the next byte that can start a sequence.
"""

from typing import NamedTuple, Optional

# U+FFFD, substituted for every malformed sequence.
REPLACEMENT_CHARACTER = b'\xef\xbf\xbd'


class _Sequence(NamedTuple):
    lead_min: int
    lead_max: int
    second_min: int
    second_max: int
    length: int


# Multi-byte sequences. Bytes after the second are always 80-BF.
_SEQUENCES = (
    _Sequence(0xC2, 0xDF, 0x80, 0xBF, 2),
    _Sequence(0xE0, 0xE0, 0xA0, 0xBF, 3),
    _Sequence(0xE1, 0xEC, 0x80, 0xBF, 3),
    _Sequence(0xED, 0xED, 0x80, 0x9F, 3),  # excludes UTF-16 surrogates
    _Sequence(0xEE, 0xEF, 0x80, 0xBF, 3),
    _Sequence(0xF0, 0xF0, 0x90, 0xBF, 4),
    _Sequence(0xF1, 0xF3, 0x80, 0xBF, 4),
    _Sequence(0xF4, 0xF4, 0x80, 0x8F, 4),  # caps at U+10FFFF
)  # yapf: disable


def is_lead_byte(byte: int) -> bool:
    """True if byte may start a UTF-8 sequence (00-7F, C2-DF, E0-EF, F0-F4)."""
    return byte <= 0x7F or 0xC2 <= byte <= 0xF4


def is_continuation_byte(byte: int) -> bool:
    return byte & 0xC0 == 0x80


def _byte_at(data: bytes, index: int) -> int:
    # Past the end reads as a NUL terminator, which is a lead byte.
    return data[index] if index < len(data) else 0


def _find_sequence(lead: int) -> Optional[_Sequence]:
    for sequence in _SEQUENCES:
        if sequence.lead_min <= lead <= sequence.lead_max:
            return sequence
    return None


def sequence_length(data: bytes, index: int = 0) -> int:
    """Returns the length of the UTF-8 sequence that starts at data[index].

    Returns:
      1 to 4 for a well-formed sequence, or a negative number whose absolute
      value is the count of malformed bytes to skip.
    """
    lead = _byte_at(data, index)

    if lead <= 0x7F:
        return 1

    sequence = _find_sequence(lead)
    if sequence is None:  # 80-C1 or F5-FF
        return -1

    second = _byte_at(data, index + 1)
    if sequence.second_min <= second <= sequence.second_max and all(
        is_continuation_byte(_byte_at(data, index + offset))
        for offset in range(2, sequence.length)
    ):
        return sequence.length

    for offset in range(1, sequence.length):
        if is_lead_byte(_byte_at(data, index + offset)):
            return -offset

    return -sequence.length
