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
"""
Make Target Graph Reconstructor

Rebuilds the target dependency graph of a Makefile from the debug trace that
GNU make prints in dry-run debug mode, and renders it as a target list, a
GraphViz DOT description, a rendered image or a JSON record.

USAGE:
    make -nd | python3 makeTraceGraph.py [options]

EXAMPLES:
    # Print the graph in GraphViz DOT format
    make -nd | python3 makeTraceGraph.py

    # List every target seen in the trace
    make -nd | python3 makeTraceGraph.py --type list

    # Render an SVG with the circo layout
    make -nd | python3 makeTraceGraph.py --type gviz --layout circo --render svg --output graph.svg

    # Dump the graph as JSON (targets, dependencies, rebuild commands)
    make -nd all | python3 makeTraceGraph.py --type json

    # Parse a saved trace and export it for Gephi
    python3 makeTraceGraph.py --input trace.txt --type none --export graph.gexf

METHOD:
    Reads the trace line by line and follows make's own recursion:
    - "Considering target file" opens a target and links it to its parent
    - "Pruning file" links a target that was resolved elsewhere
    - "Must remake target" marks a target and collects its commands
    - "Finished prerequisites of target file" closes the current target

    Output colors targets that must be remade red and up to date targets green.
"""

import io
import sys
import logging
import argparse
from typing import List, Optional

from makegraph.color_utils import Colors, print_error, print_success, print_warning, should_use_color
from makegraph.constants import (
    EXIT_SUCCESS,
    DEFAULT_OUTPUT_TYPE,
    DEFAULT_LAYOUT,
    DEFAULT_RENDER_FORMAT,
    DEFAULT_MAX_TRACE_DEPTH,
    TRACE_ENCODING,
    TRACE_DECODE_ERRORS,
    ArgumentError,
)
from makegraph.render_config import OUTPUT_SELECTORS, LAYOUT_PROGRAMS, RENDER_FORMATS, RenderConfig
from makegraph.renderers import export_graph, render_graph
from makegraph.target_graph import TargetGraph
from makegraph.trace_parser import TraceParser

logger = logging.getLogger(__name__)


def read_trace(input_path: Optional[str], parser: TraceParser) -> TargetGraph:
    """Parse the trace from a file, or from stdin when no path is given."""
    if input_path is None or input_path == "-":
        logger.debug("Reading trace from stdin")
        if isinstance(sys.stdin, io.TextIOWrapper):
            sys.stdin.reconfigure(encoding=TRACE_ENCODING, errors=TRACE_DECODE_ERRORS)
        return parser.parse(sys.stdin)

    logger.debug("Reading trace from %s", input_path)
    with open(input_path, "r", encoding=TRACE_ENCODING, errors=TRACE_DECODE_ERRORS) as f:
        return parser.parse(f)


def write_output(graph: TargetGraph, config: RenderConfig, output_path: Optional[str]) -> None:
    """Render the graph to a file, or to stdout when no path is given."""
    if output_path is None or output_path == "-":
        stream = sys.stdout.buffer if config.is_binary else sys.stdout
        render_graph(graph, config, stream)
        stream.flush()
        return

    if config.is_binary:
        with open(output_path, "wb") as f:
            render_graph(graph, config, f)
    else:
        with open(output_path, "w", encoding="utf-8") as f:
            render_graph(graph, config, f)
    logger.info("Wrote %s output to %s", config.output_format.value, output_path)


def warn_on_trace_problems(parser: TraceParser) -> None:
    """Report non-fatal trace inconsistencies on stderr."""
    stats = parser.stats
    if stats.consistency_warnings:
        print_warning(f"{stats.consistency_warnings} finished marker(s) named a different target than expected, the graph may be incomplete")
    if stats.unterminated_command_blocks:
        print_warning(f"{stats.unterminated_command_blocks} command block(s) were cut off by the end of the trace")


def print_summary(graph: TargetGraph, parser: TraceParser) -> None:
    """Print a short colored summary of the parse to stderr."""
    stats = parser.stats
    rebuild_count = len(graph.rebuild_targets())
    edge_count = len(graph.edges())

    print(f"{Colors.BRIGHT}Targets:{Colors.RESET} {len(graph) - 1}  " f"{Colors.BRIGHT}Edges:{Colors.RESET} {edge_count}", file=sys.stderr)
    rebuild_color = Colors.RED if rebuild_count else Colors.GREEN
    print(f"{Colors.BRIGHT}Must remake:{Colors.RESET} {rebuild_color}{rebuild_count}{Colors.RESET}", file=sys.stderr)
    print(
        f"{Colors.DIM}Lines read: {stats.lines_read}, skipped: {stats.lines_burned}, " f"consistency warnings: {stats.consistency_warnings}{Colors.RESET}",
        file=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Reconstruct a Makefile target graph from `make -nd` debug output",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  make -nd | %(prog)s
  make -nd | %(prog)s --type list
  make -nd | %(prog)s --type gviz --layout circo --render png --output graph.png
  make -nd | %(prog)s --type json
  %(prog)s --input trace.txt --export graph.graphml
        """,
    )

    parser.add_argument(
        "--type",
        default=DEFAULT_OUTPUT_TYPE,
        metavar="TYPE",
        help=f"The type of output to produce, supported: [{', '.join(OUTPUT_SELECTORS)}] (default: {DEFAULT_OUTPUT_TYPE})",
    )
    parser.add_argument(
        "--layout",
        default=DEFAULT_LAYOUT,
        metavar="LAYOUT",
        help=f"The layout engine to use when creating a gviz image, supported: [{', '.join(LAYOUT_PROGRAMS)}] (default: {DEFAULT_LAYOUT})",
    )
    parser.add_argument(
        "--render",
        default=DEFAULT_RENDER_FORMAT,
        metavar="FORMAT",
        help=f"The format to render gviz to, supported: [{', '.join(RENDER_FORMATS)}] (default: {DEFAULT_RENDER_FORMAT})",
    )
    parser.add_argument("--input", metavar="FILE", help="Read the trace from FILE instead of stdin")
    parser.add_argument("--output", metavar="FILE", help="Write the rendered output to FILE instead of stdout")
    parser.add_argument("--export", metavar="FILE", help="Also export the graph to FILE (.graphml, .gexf, .json or .dot)")
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_TRACE_DEPTH,
        help=f"Maximum target nesting accepted before the trace is rejected (default: {DEFAULT_MAX_TRACE_DEPTH})",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored messages")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging output")

    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    if args.max_depth < 1:
        raise ArgumentError(f"--max-depth must be at least 1, got {args.max_depth}")

    # Validate selectors before consuming the trace
    config = RenderConfig.from_strings(args.type, args.layout, args.render)

    trace_parser = TraceParser(max_depth=args.max_depth)
    graph = read_trace(args.input, trace_parser)
    warn_on_trace_problems(trace_parser)

    write_output(graph, config, args.output)

    if args.export:
        export_graph(graph, args.export)

    if args.verbose:
        print_summary(graph, trace_parser)
        if args.output:
            print_success(f"Wrote {config.output_format.value} output to {args.output}", file=sys.stderr)

    return EXIT_SUCCESS


if __name__ == "__main__":
    from makegraph.constants import EXIT_KEYBOARD_INTERRUPT, EXIT_RUNTIME_ERROR, MakeGraphError

    try:
        exit_code = main()
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except MakeGraphError as e:
        print_error(str(e))
        sys.exit(e.exit_code)
    except OSError as e:
        print_error(f"I/O failure: {e}")
        sys.exit(EXIT_RUNTIME_ERROR)
    except Exception as e:
        print_error(f"Fatal error: {e}", prefix=False)
        sys.exit(EXIT_RUNTIME_ERROR)
