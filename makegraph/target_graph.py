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
"""Target registry and graph model built from a make debug trace."""

import logging
from typing import Dict, List, Tuple, Any, Iterator
from dataclasses import dataclass, field

import networkx as nx

from makegraph.constants import ROOT_TARGET_NAME

logger = logging.getLogger(__name__)


@dataclass
class Target:
    """One make target (file, phony target or the synthetic root).

    Attributes:
        id: Sequential identifier assigned at first registration
        name: Target name exactly as make prints it (may contain spaces)
        children: Names of dependencies considered while resolving this target, in trace order
        commands: Commands make would run to rebuild this target
        must_remake: True once the trace reports the target must be remade
    """

    id: int
    name: str
    children: List[str] = field(default_factory=list)
    commands: List[str] = field(default_factory=list)
    must_remake: bool = False

    def add_child(self, child: "Target") -> None:
        """Append a dependency edge; repeated edges are kept."""
        self.children.append(child.name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "children": list(self.children),
            "commands": list(self.commands),
            "must_remake": self.must_remake,
        }


class TargetGraph:
    """Mapping of target names to targets plus the synthetic root.

    Targets are interned: get_or_create() always hands back the same Target
    for a name, so diamond dependencies and targets reported again share
    one node.
    """

    def __init__(self, root_name: str = ROOT_TARGET_NAME):
        self.targets: Dict[str, Target] = {}
        self._next_id = 0
        self.root_name = root_name
        self.root = self.get_or_create(root_name)

    def get_or_create(self, name: str) -> Target:
        """Return the target registered under name, creating it if needed.

        Args:
            name: Target name

        Returns:
            The unique Target for name
        """
        target = self.targets.get(name)
        if target is not None:
            return target

        target = Target(id=self._next_id, name=name)
        self.targets[name] = target
        self._next_id += 1
        logger.debug("Registered target %d: %s", target.id, name)
        return target

    @property
    def next_id(self) -> int:
        """Identifier the next newly registered target will receive."""
        return self._next_id

    def __contains__(self, name: object) -> bool:
        return name in self.targets

    def __len__(self) -> int:
        return len(self.targets)

    def __iter__(self) -> Iterator[Target]:
        return iter(self.targets_by_id())

    def targets_by_id(self) -> List[Target]:
        """All targets, root included, sorted by id."""
        return sorted(self.targets.values(), key=lambda t: t.id)

    def non_root_targets(self) -> List[Target]:
        return [t for t in self.targets_by_id() if t.name != self.root_name]

    def rebuild_targets(self) -> List[Target]:
        """Targets the trace reported as needing a rebuild, sorted by id."""
        return [t for t in self.targets_by_id() if t.must_remake]

    def edges(self) -> List[Tuple[str, str]]:
        """All (parent, child) edges, by parent id then child order."""
        return [(target.name, child) for target in self.targets_by_id() for child in target.children]

    def parents_of(self, name: str) -> List[str]:
        """Names of targets listing name as a child, by parent id."""
        return [target.name for target in self.targets_by_id() if name in target.children]

    def to_dict(self) -> Dict[str, Any]:
        """Structured record of the whole graph, ordered by target id."""
        return {
            "root": self.root_name,
            "targets": [target.to_dict() for target in self.targets_by_id()],
        }

    def to_networkx(self) -> "nx.MultiDiGraph[str]":
        """Build a NetworkX multigraph of the targets.

        Nodes are keyed by target name. Edges point from parent to child and
        duplicated child entries become parallel edges.

        Returns:
            NetworkX MultiDiGraph
        """
        G: nx.MultiDiGraph[str] = nx.MultiDiGraph()

        for target in self.targets_by_id():
            G.add_node(
                target.name,
                id=target.id,
                label=target.name,
                must_remake=target.must_remake,
                commands=list(target.commands),
                is_root=target.name == self.root_name,
            )

        G.add_edges_from(self.edges())

        logger.debug("Built graph with %s nodes and %s edges", G.number_of_nodes(), G.number_of_edges())
        return G
