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
"""Output selection for rendering a parsed target graph."""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, List, Tuple

from makegraph.constants import DEFAULT_OUTPUT_TYPE, DEFAULT_LAYOUT, DEFAULT_RENDER_FORMAT, ArgumentError


class OutputFormat(Enum):
    """Kinds of output the tool can produce."""

    NONE = "none"  # Parse only
    LIST = "list"  # One target name per line
    DOT = "dot"  # Graphviz graph description text
    GVIZ = "gviz"  # Image rendered by Graphviz
    JSON = "json"  # Structured record of the whole graph


# Selector strings accepted on the command line
OUTPUT_SELECTORS: Dict[str, OutputFormat] = {
    "none": OutputFormat.NONE,
    "list": OutputFormat.LIST,
    "dot": OutputFormat.DOT,
    "gviz": OutputFormat.GVIZ,
    "gv": OutputFormat.GVIZ,
    "json": OutputFormat.JSON,
}

# Layout name -> Graphviz program invocation
LAYOUT_PROGRAMS: Dict[str, Tuple[str, ...]] = {
    "dot": ("dot",),
    "circo": ("circo",),
    "fdp": ("fdp",),
    "neato": ("neato",),
    "nop": ("neato", "-n"),
    "nop1": ("neato", "-n1"),
    "nop2": ("neato", "-n2"),
    "osage": ("osage",),
    "patchwork": ("patchwork",),
    "sfdp": ("sfdp",),
    "twopi": ("twopi",),
}

RENDER_FORMATS: List[str] = ["dot", "svg", "png", "jpg"]


def _lookup_error(kind: str, value: str, supported: List[str]) -> ArgumentError:
    return ArgumentError(f"Unknown {kind} '{value}', supported: [{', '.join(supported)}]")


@dataclass(frozen=True)
class RenderConfig:
    """Rendering choices threaded from the command line to the renderer.

    Attributes:
        output_format: Which renderer to use
        layout: Graphviz layout algorithm (image output only)
        render_format: Image/vector/description format (image output only)
    """

    output_format: OutputFormat = OutputFormat.DOT
    layout: str = DEFAULT_LAYOUT
    render_format: str = DEFAULT_RENDER_FORMAT

    def __post_init__(self) -> None:
        if self.layout not in LAYOUT_PROGRAMS:
            raise _lookup_error("layout", self.layout, list(LAYOUT_PROGRAMS))
        if self.render_format not in RENDER_FORMATS:
            raise _lookup_error("render format", self.render_format, RENDER_FORMATS)

    @property
    def layout_program(self) -> Tuple[str, ...]:
        """Graphviz program and arguments implementing the layout."""
        return LAYOUT_PROGRAMS[self.layout]

    @property
    def is_binary(self) -> bool:
        """True if the renderer produces bytes rather than text."""
        return self.output_format is OutputFormat.GVIZ

    @classmethod
    def from_strings(
        cls, output_type: str = DEFAULT_OUTPUT_TYPE, layout: str = DEFAULT_LAYOUT, render_format: str = DEFAULT_RENDER_FORMAT
    ) -> "RenderConfig":
        """Build a config from command-line selector strings.

        Raises:
            ArgumentError: If any selector is unknown
        """
        output_format = OUTPUT_SELECTORS.get(output_type)
        if output_format is None:
            raise _lookup_error("output type", output_type, list(OUTPUT_SELECTORS))
        return cls(output_format=output_format, layout=layout, render_format=render_format)
