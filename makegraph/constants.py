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
"""Shared constants for the make trace graph tools.

This module provides centralized constants used by the trace parser, the
renderers and the command-line entry point, together with the exception
hierarchy every component raises.
"""

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_RENDER_FAILED = 3  # Graphviz missing or failed while rendering an image
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Graph Model Constants
# =============================================================================

ROOT_TARGET_NAME = "<ROOT>"  # Synthetic root, never a valid make target name
ROOT_LABEL = "root"  # Label used for the root in rendered graphs

# =============================================================================
# Trace Markers (GNU make debug output, matched case-sensitively)
# =============================================================================

CONSIDERING_PREFIX = "Considering target file"
MUST_REMAKE_PREFIX = "Must remake target "
PRUNING_PREFIX = "Pruning file "
FINISHED_PREFIX = "Finished prerequisites of target file "
CONSIDERED_ALREADY_SUFFIX = "was considered already."
READING_MAKEFILE_PREFIX = "Reading makefile "
REMADE_PREFIX = "Successfully remade target file "

# Parallel job control chatter that can show up inside a command block
CHILD_BOOKKEEPING_PREFIXES = (
    "Putting child ",
    "Removing child ",
    "Live child ",
    "Reaping winning child ",
)

# Target names are opened by a backtick (make < 4.0) or a quote and closed by a quote
NAME_OPEN_BACKTICK = "`"
NAME_QUOTE = "'"

# =============================================================================
# Parser Limits
# =============================================================================

DEFAULT_MAX_TRACE_DEPTH = 1000  # Maximum nesting of open target frames

# Traces are decoded as UTF-8; undecodable bytes in recipe output become U+FFFD
TRACE_ENCODING = "utf-8"
TRACE_DECODE_ERRORS = "replace"

# =============================================================================
# Output Constants
# =============================================================================

DEFAULT_OUTPUT_TYPE = "dot"
DEFAULT_LAYOUT = "dot"
DEFAULT_RENDER_FORMAT = "svg"

REMAKE_COLOR = "red"  # Node color for targets that must be remade
UP_TO_DATE_COLOR = "green"  # Node color for targets that are up to date

SUPPORTED_GRAPH_FORMATS = [".graphml", ".dot", ".gexf", ".json"]

# =============================================================================
# Exception Classes
# =============================================================================


class MakeGraphError(Exception):
    """Base exception for all make trace graph errors.

    All exceptions carry an exit_code attribute that indicates what exit code
    the program should use when this error is caught at the main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(MakeGraphError):
    """Raised when input validation fails (arguments, paths, etc)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class ArgumentError(ValidationError):
    """Raised when command-line arguments or output selectors are invalid."""


# Trace errors (EXIT_RUNTIME_ERROR)
class TraceParseError(MakeGraphError):
    """Raised when the debug trace cannot be consumed safely."""


class TraceFormatError(TraceParseError):
    """Raised when a trace line is malformed (e.g. a target name has no delimiter)."""


class TraceDepthError(TraceParseError):
    """Raised when target frames nest deeper than the configured ceiling."""


# External tool errors
class RenderError(MakeGraphError):
    """Raised when Graphviz is missing or fails to render an image."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_RENDER_FAILED)
