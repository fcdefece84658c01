"""
Top-to-bottom layered layout for the question graph.

Cycles are collapsed into their strongly connected components so that every
graph, including loops back to earlier questions, gets a rank per node.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import networkx as nx

NODE_WIDTH = 200
NODE_HEIGHT = 50
NODE_SEP = 50
RANK_SEP = 100


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


def _build_graph(nodes: Iterable[str], edges: Iterable[tuple[str, str]]) -> nx.DiGraph:
    graph = nx.DiGraph()
    graph.add_nodes_from(nodes)
    for source, target in edges:
        # Edges to unknown nodes carry no position information
        if source in graph and target in graph:
            graph.add_edge(source, target)
    return graph


def rank_nodes(nodes: Iterable[str], edges: Iterable[tuple[str, str]]) -> list[list[str]]:
    """Group nodes into ranks; members of a cycle share one rank."""
    node_list = list(nodes)
    order = {node: index for index, node in enumerate(node_list)}
    graph = _build_graph(node_list, edges)

    condensed = nx.condensation(graph)
    members = condensed.graph["mapping"]
    ranks: list[list[str]] = []
    for generation in nx.topological_generations(condensed):
        rank = [node for node, component in members.items() if component in generation]
        ranks.append(sorted(rank, key=order.__getitem__))
    return ranks


def layout(nodes: Iterable[str], edges: Iterable[tuple[str, str]]) -> dict[str, Position]:
    """
    Compute node centre coordinates.

    Args:
        nodes: Node ids in display order
        edges: (source, target) pairs

    Returns:
        Mapping of node id to Position
    """
    positions: dict[str, Position] = {}
    for depth, rank in enumerate(rank_nodes(nodes, edges)):
        width = len(rank) * NODE_WIDTH + (len(rank) - 1) * NODE_SEP
        left = -width / 2 + NODE_WIDTH / 2
        for index, node in enumerate(rank):
            positions[node] = Position(
                x=left + index * (NODE_WIDTH + NODE_SEP),
                y=depth * (NODE_HEIGHT + RANK_SEP),
            )
    return positions
