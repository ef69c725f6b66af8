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
"""Parser that rebuilds make's target dependency graph from a ``make -nd`` trace.

make resolves targets recursively and prints one debug message per step,
indented by recursion depth. The parser mirrors that recursion with an
explicit stack of frames, one per target whose prerequisites are still being
considered:

    Considering target file 'all'.              <- frame for 'all' opens
     File 'all' does not exist.
      Considering target file 'a'.              <- child of 'all', frame opens
       Finished prerequisites of target file 'a'.   <- frame for 'a' closes
      Must remake target 'a'.
    echo a                                      <- command block for 'a'
      Successfully remade target file 'a'.
     Finished prerequisites of target file 'all'.   <- frame for 'all' closes

A frame opened by a "Considering" line at depth d owns the lines at depth
d + 1. A child "Considering" line is attached to the frame on top of the
stack when it is at most one level deeper than the frame's own lines, and the
same bound decides whether a "Finished" line closes the frame.
"""

import io
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from makegraph.constants import DEFAULT_MAX_TRACE_DEPTH, REMADE_PREFIX, TraceDepthError
from makegraph.target_graph import Target, TargetGraph
from makegraph.trace_lines import TraceLine, TraceLineKind, classify_line, find_indent_and_trim, is_child_bookkeeping, is_finished_marker, target_name_from_line

logger = logging.getLogger(__name__)


@dataclass
class ParseStats:
    """Counters collected while parsing a trace.

    Attributes:
        lines_read: Total lines consumed from the stream
        lines_burned: Lines skipped while a makefile re-considered itself
        frames_opened: Number of target frames pushed (root excluded)
        consistency_warnings: Finished markers naming a different target than their frame
        unterminated_command_blocks: Command blocks cut off by the end of the stream
    """

    lines_read: int = 0
    lines_burned: int = 0
    frames_opened: int = 0
    consistency_warnings: int = 0
    unterminated_command_blocks: int = 0


@dataclass
class _Frame:
    target: Target
    level: int
    makefile_name: Optional[str] = None


def read_command_block(lines: Iterator[str]) -> Tuple[List[str], bool]:
    """Collect the commands printed after a "Must remake target" line.

    Reads until the "Successfully remade target file" sentinel. Parallel job
    bookkeeping lines are dropped, every other line is kept in order with its
    indentation removed.

    Args:
        lines: Trace line iterator positioned after the must-remake line

    Returns:
        Tuple of (commands, terminated) where terminated is False when the
        stream ended before the sentinel
    """
    commands: List[str] = []
    for raw_line in lines:
        trimmed, _ = find_indent_and_trim(raw_line.rstrip("\r\n"))
        if trimmed.startswith(REMADE_PREFIX):
            return commands, True
        if is_child_bookkeeping(trimmed):
            continue
        commands.append(trimmed)
    return commands, False


def burn_scan(lines: Iterator[str], makefile_name: str) -> int:
    """Skip the sub-trace of a makefile considering itself as a target.

    Consumes lines up to and including the finished marker that names the
    makefile.

    Args:
        lines: Trace line iterator positioned after the considering line
        makefile_name: Name of the makefile being re-considered

    Returns:
        Number of lines consumed
    """
    burned = 0
    for raw_line in lines:
        burned += 1
        trimmed, _ = find_indent_and_trim(raw_line.rstrip("\r\n"))
        if is_finished_marker(trimmed) and target_name_from_line(trimmed) == makefile_name:
            break
    return burned


class TraceParser:
    """Single pass parser populating a TargetGraph from trace lines."""

    def __init__(self, graph: Optional[TargetGraph] = None, max_depth: int = DEFAULT_MAX_TRACE_DEPTH):
        self.graph = graph if graph is not None else TargetGraph()
        self.max_depth = max_depth
        self.stats = ParseStats()

    def _counted(self, lines: Iterable[str]) -> Iterator[str]:
        for raw_line in lines:
            self.stats.lines_read += 1
            yield raw_line

    def parse(self, lines: Iterable[str]) -> TargetGraph:
        """Consume trace lines and build the target graph.

        Parsing ends when the stream is exhausted or when the root frame is
        closed by a finished marker.

        Args:
            lines: Iterable of trace lines (e.g. an open file or sys.stdin)

        Returns:
            The populated TargetGraph

        Raises:
            TraceFormatError: If a line needed for the graph has no name delimiters
            TraceDepthError: If frames nest deeper than max_depth
        """
        line_iter = self._counted(lines)
        stack: List[_Frame] = [_Frame(target=self.graph.root, level=0)]

        for raw_line in line_iter:
            line = classify_line(raw_line)
            frame = stack[-1]

            if line.kind is TraceLineKind.CONSIDERING:
                self._on_considering(line, frame, stack, line_iter)
            elif line.kind is TraceLineKind.MUST_REMAKE:
                self._on_must_remake(line, line_iter)
            elif line.kind is TraceLineKind.PRUNING:
                frame.target.add_child(self.graph.get_or_create(line.name))
            elif line.kind is TraceLineKind.FINISHED and line.depth <= frame.level + 1:
                self._on_finished(line, frame)
                stack.pop()
                if not stack:
                    break
            elif line.kind is TraceLineKind.READING_MAKEFILE:
                frame.makefile_name = line.name
                logger.debug("Reading makefile '%s'", frame.makefile_name)

        if len(stack) > 1:
            logger.debug("Trace ended with %d target frames still open", len(stack) - 1)

        logger.info(
            "Parsed %d trace lines into %d targets (%d must be remade)",
            self.stats.lines_read,
            len(self.graph) - 1,
            len(self.graph.rebuild_targets()),
        )
        return self.graph

    def _on_considering(self, line: TraceLine, frame: _Frame, stack: List[_Frame], line_iter: Iterator[str]) -> None:
        name = line.name
        burned = False
        if frame.makefile_name is not None and name == frame.makefile_name:
            burned_lines = burn_scan(line_iter, name)
            self.stats.lines_burned += burned_lines
            burned = True
            logger.debug("Skipped %d lines of makefile '%s' considering itself", burned_lines, name)

        child = self.graph.get_or_create(name)
        if line.depth > frame.level + 1:
            return

        frame.target.add_child(child)
        if burned:
            return

        if len(stack) > self.max_depth:
            raise TraceDepthError(f"Target '{name}' is nested deeper than the maximum of {self.max_depth} frames")
        stack.append(_Frame(target=child, level=line.depth + 1))
        self.stats.frames_opened += 1

    def _on_must_remake(self, line: TraceLine, line_iter: Iterator[str]) -> None:
        target = self.graph.get_or_create(line.name)
        commands, terminated = read_command_block(line_iter)
        if not terminated:
            self.stats.unterminated_command_blocks += 1
            logger.warning("Trace ended before target '%s' was reported as remade", target.name)

        if target.must_remake:
            logger.debug("Target '%s' reported as must remake again, keeping its first commands", target.name)
            return

        target.must_remake = True
        target.commands = commands

    def _on_finished(self, line: TraceLine, frame: _Frame) -> None:
        if line.name != frame.target.name:
            self.stats.consistency_warnings += 1
            logger.warning("expected '%s' got '%s'", frame.target.name, line.text)


def parse_trace(lines: Iterable[str], max_depth: int = DEFAULT_MAX_TRACE_DEPTH) -> TargetGraph:
    """Parse trace lines into a new TargetGraph."""
    return TraceParser(max_depth=max_depth).parse(lines)


def parse_trace_text(text: str, max_depth: int = DEFAULT_MAX_TRACE_DEPTH) -> TargetGraph:
    """Parse a whole trace held in a string."""
    return parse_trace(io.StringIO(text), max_depth=max_depth)
