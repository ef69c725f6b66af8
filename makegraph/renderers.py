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
"""Renderers and exporters for parsed target graphs.

Every renderer orders targets by id and edges by parent id then child
position, so identical traces always produce identical output.
"""

import os
import sys
import json
import logging
from typing import Any, BinaryIO, Callable, Dict, TextIO, Union

import networkx as nx
from networkx.readwrite import json_graph
import pydot

from makegraph.color_utils import print_success
from makegraph.constants import (
    ROOT_LABEL,
    REMAKE_COLOR,
    UP_TO_DATE_COLOR,
    SUPPORTED_GRAPH_FORMATS,
    ArgumentError,
    RenderError,
)
from makegraph.render_config import OutputFormat, RenderConfig
from makegraph.target_graph import Target, TargetGraph

logger = logging.getLogger(__name__)


def node_id(target: Target) -> str:
    """Rendering identifier of a target (e.g. 'n3')."""
    return f"n{target.id}"


def node_color(target: Target) -> str:
    return REMAKE_COLOR if target.must_remake else UP_TO_DATE_COLOR


def escape_dot_label(text: str) -> str:
    """Escape a string for use inside a double quoted DOT attribute."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def render_none(graph: TargetGraph, stream: TextIO) -> None:
    """Write nothing; used to validate a trace without producing output."""
    logger.debug("Output type 'none', %d targets not rendered", len(graph))


def render_list(graph: TargetGraph, stream: TextIO) -> None:
    """Write one target name per line in id order, root excluded."""
    for target in graph.non_root_targets():
        stream.write(f"{target.name}\n")


def render_dot(graph: TargetGraph, stream: TextIO) -> None:
    """Write the graph in Graphviz DOT format.

    The root is drawn as a point, targets that must be remade are red and up
    to date targets green. Edges point from dependency to dependent.
    """
    stream.write("digraph G {\n")
    for target in graph.targets_by_id():
        if target.name == graph.root_name:
            stream.write(f'{node_id(target)}[shape=point, label="{ROOT_LABEL}"];\n')
        else:
            stream.write(f'{node_id(target)}[label="{escape_dot_label(target.name)}", color="{node_color(target)}"];\n')

    for parent_name, child_name in graph.edges():
        parent = graph.targets[parent_name]
        child = graph.targets[child_name]
        stream.write(f"{node_id(child)} -> {node_id(parent)} ;\n")
    stream.write("}\n")


def build_pydot_graph(graph: TargetGraph) -> pydot.Dot:
    """Convert the target graph to a styled pydot graph for Graphviz."""
    dot_graph = pydot.Dot("G", graph_type="digraph")

    for target in graph.targets_by_id():
        if target.name == graph.root_name:
            dot_graph.add_node(pydot.Node(node_id(target), label=ROOT_LABEL, shape="point"))
            continue
        attributes: Dict[str, Any] = {
            "label": f'"{escape_dot_label(target.name)}"',
            "shape": "circle",
            "color": node_color(target),
        }
        if target.commands:
            tooltip = "\n".join(target.commands)
            attributes["tooltip"] = f'"{escape_dot_label(tooltip)}"'
        dot_graph.add_node(pydot.Node(node_id(target), **attributes))

    for parent_name, child_name in graph.edges():
        dot_graph.add_edge(pydot.Edge(node_id(graph.targets[child_name]), node_id(graph.targets[parent_name])))

    return dot_graph


def render_image(graph: TargetGraph, config: RenderConfig) -> bytes:
    """Lay out and render the graph with Graphviz.

    Args:
        graph: Parsed target graph
        config: Render configuration selecting layout and output format

    Returns:
        Rendered image (or layout description) bytes

    Raises:
        RenderError: If Graphviz is not installed or fails
    """
    dot_graph = build_pydot_graph(graph)
    program = list(config.layout_program)
    logger.debug("Rendering %d targets with %s as %s", len(graph), " ".join(program), config.render_format)

    try:
        return dot_graph.create(prog=program, format=config.render_format)
    except (OSError, AssertionError) as e:
        raise RenderError(f"Graphviz failed to render layout '{config.layout}' as {config.render_format}: {e}") from e


def render_json(graph: TargetGraph, stream: TextIO) -> None:
    """Write the structured record of the whole graph as JSON."""
    stream.write(json.dumps(graph.to_dict(), indent=2))
    stream.write("\n")


TEXT_RENDERERS: Dict[OutputFormat, Callable[[TargetGraph, TextIO], None]] = {
    OutputFormat.NONE: render_none,
    OutputFormat.LIST: render_list,
    OutputFormat.DOT: render_dot,
    OutputFormat.JSON: render_json,
}


def render_graph(graph: TargetGraph, config: RenderConfig, stream: Union[TextIO, BinaryIO]) -> None:
    """Render the graph to a stream with the renderer chosen by config.

    Args:
        graph: Parsed target graph
        config: Render configuration
        stream: Text stream, or binary stream when config.is_binary
    """
    if config.output_format is OutputFormat.GVIZ:
        stream.write(render_image(graph, config))  # type: ignore[arg-type]
        return

    renderer = TEXT_RENDERERS[config.output_format]
    renderer(graph, stream)  # type: ignore[arg-type]


def _export_ready_graph(graph: TargetGraph) -> "nx.MultiDiGraph[str]":
    """NetworkX graph whose attributes every exporter can serialize."""
    G = graph.to_networkx()
    for name in G.nodes():
        target = graph.targets[name]
        G.nodes[name]["commands"] = "\n".join(target.commands)
        G.nodes[name]["color"] = node_color(target)
        G.nodes[name]["fan_out"] = len(target.children)
        G.nodes[name]["fan_in"] = len(graph.parents_of(name))
    return G


def export_graph(graph: TargetGraph, filename: str) -> None:
    """Export the target graph to a graph interchange file.

    Supports: GraphML (.graphml), DOT (.dot), GEXF (.gexf), JSON (.json, node-link)

    Node attributes:
        - id: Target id
        - label: Target name
        - must_remake: Whether make would rebuild the target
        - commands: Rebuild commands joined by newlines
        - is_root: True for the synthetic root
        - color: Rendering color (red = must remake)
        - fan_out: Number of prerequisites (duplicates counted)
        - fan_in: Number of distinct targets depending on the target

    Args:
        filename: Output filename (extension determines format)

    Raises:
        ArgumentError: If the extension is not a supported graph format
    """
    ext = os.path.splitext(filename)[1].lower()
    if ext not in SUPPORTED_GRAPH_FORMATS:
        raise ArgumentError(f"Unsupported graph format '{ext}', supported: [{', '.join(SUPPORTED_GRAPH_FORMATS)}]")

    G = _export_ready_graph(graph)

    if ext == ".graphml":
        nx.write_graphml(G, filename)
    elif ext == ".gexf":
        nx.write_gexf(G, filename)
    elif ext == ".json":
        data = json_graph.node_link_data(G)
        with open(filename, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    else:
        # Target names may contain ':' which pydot reads as a port separator
        mapping = {name: f"n{G.nodes[name]['id']}" for name in G.nodes()}
        relabeled = nx.relabel_nodes(G, mapping)
        for node in relabeled.nodes():
            relabeled.nodes[node]["label"] = f'"{escape_dot_label(relabeled.nodes[node]["label"])}"'
            relabeled.nodes[node]["commands"] = f'"{escape_dot_label(relabeled.nodes[node]["commands"])}"'
        nx.drawing.nx_pydot.write_dot(relabeled, filename)

    logger.info("Exported target graph to %s", filename)
    print_success(f"Exported target graph to {filename}", file=sys.stderr)
