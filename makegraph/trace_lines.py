#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""Line classification for GNU make debug traces.

A ``make -nd`` transcript indents every debug message by the recursion depth
of the target being resolved (one space per level). This module strips that
indentation, recognizes the handful of messages the graph builder cares about
and extracts the target names embedded in them.

Target names are quoted either as `name' (make < 4.0) or 'name' (make >= 4.0).
"""

import enum
import logging
from dataclasses import dataclass
from typing import Tuple

from makegraph.constants import (
    CONSIDERING_PREFIX,
    MUST_REMAKE_PREFIX,
    PRUNING_PREFIX,
    FINISHED_PREFIX,
    CONSIDERED_ALREADY_SUFFIX,
    READING_MAKEFILE_PREFIX,
    REMADE_PREFIX,
    CHILD_BOOKKEEPING_PREFIXES,
    NAME_OPEN_BACKTICK,
    NAME_QUOTE,
    TraceFormatError,
)

logger = logging.getLogger(__name__)


class TraceLineKind(enum.Enum):
    """Categories of trace lines recognized by the parser."""

    CONSIDERING = "considering"
    MUST_REMAKE = "must-remake"
    PRUNING = "pruning"
    FINISHED = "finished"
    READING_MAKEFILE = "reading-makefile"
    REMADE = "remade"
    CHILD_BOOKKEEPING = "child-bookkeeping"
    OTHER = "other"


# Kinds whose text carries a quoted target (or makefile) name
NAMED_KINDS = frozenset(
    {
        TraceLineKind.CONSIDERING,
        TraceLineKind.MUST_REMAKE,
        TraceLineKind.PRUNING,
        TraceLineKind.FINISHED,
        TraceLineKind.READING_MAKEFILE,
    }
)


def count_leading_spaces(line: str) -> int:
    """Count leading space characters (tabs are not indentation)."""
    return len(line) - len(line.lstrip(" "))


def find_indent_and_trim(line: str) -> Tuple[str, int]:
    """Strip leading space indentation from a trace line.

    Args:
        line: Raw trace line without its line terminator

    Returns:
        Tuple of (trimmed line, number of spaces removed)
    """
    leading_spaces = count_leading_spaces(line)
    return line[leading_spaces:], leading_spaces


def target_name_from_line(line: str) -> str:
    """Extract the quoted target name from a trace line.

    The name starts right after the first backtick, or after the first single
    quote when the line has no backtick, and ends at the next single quote.
    Names may contain spaces.

    Args:
        line: Trace line (indentation may or may not be stripped)

    Returns:
        The target name between the delimiters

    Raises:
        TraceFormatError: If no opening delimiter or no closing quote exists
    """
    start = line.find(NAME_OPEN_BACKTICK)
    if start == -1:
        start = line.find(NAME_QUOTE)
        if start == -1:
            raise TraceFormatError(f"Cannot find the start of the target name in line: {line}")

    end = line.find(NAME_QUOTE, start + 1)
    if end == -1:
        raise TraceFormatError(f"Cannot find the end of the target name in line: {line}")

    return line[start + 1 : end]


def is_child_bookkeeping(trimmed_line: str) -> bool:
    """Check if a line is parallel job control chatter."""
    return trimmed_line.startswith(CHILD_BOOKKEEPING_PREFIXES)


def is_finished_marker(trimmed_line: str) -> bool:
    """Check if a line closes the resolution of a target."""
    return trimmed_line.startswith(FINISHED_PREFIX) or trimmed_line.endswith(CONSIDERED_ALREADY_SUFFIX)


def classify_text(trimmed_line: str) -> TraceLineKind:
    """Determine the category of an already trimmed trace line."""
    if trimmed_line.startswith(CONSIDERING_PREFIX):
        return TraceLineKind.CONSIDERING
    if trimmed_line.startswith(MUST_REMAKE_PREFIX):
        return TraceLineKind.MUST_REMAKE
    if trimmed_line.startswith(PRUNING_PREFIX):
        return TraceLineKind.PRUNING
    if is_finished_marker(trimmed_line):
        return TraceLineKind.FINISHED
    if trimmed_line.startswith(READING_MAKEFILE_PREFIX):
        return TraceLineKind.READING_MAKEFILE
    if trimmed_line.startswith(REMADE_PREFIX):
        return TraceLineKind.REMADE
    if is_child_bookkeeping(trimmed_line):
        return TraceLineKind.CHILD_BOOKKEEPING
    return TraceLineKind.OTHER


@dataclass(frozen=True)
class TraceLine:
    """A single classified trace line.

    Attributes:
        kind: Recognized category of the line
        depth: Number of leading spaces (recursion depth reported by make)
        text: Line with indentation and line terminator removed
    """

    kind: TraceLineKind
    depth: int
    text: str

    @property
    def has_name(self) -> bool:
        """True if this kind of line embeds a target or makefile name."""
        return self.kind in NAMED_KINDS

    @property
    def name(self) -> str:
        """Embedded target name, extracted on demand.

        Raises:
            TraceFormatError: If the line has no name delimiters
        """
        return target_name_from_line(self.text)


def classify_line(raw_line: str) -> TraceLine:
    """Classify one raw trace line.

    Args:
        raw_line: Line as read from the trace stream, terminator included or not

    Returns:
        TraceLine with kind, depth and trimmed text
    """
    trimmed, depth = find_indent_and_trim(raw_line.rstrip("\r\n"))
    return TraceLine(kind=classify_text(trimmed), depth=depth, text=trimmed)
