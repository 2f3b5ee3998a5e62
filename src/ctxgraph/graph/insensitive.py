"""The context-insensitive call graph."""

from __future__ import annotations

from typing import Any

import networkx as nx

from ctxgraph.exceptions import GraphFrozenError
from ctxgraph.graph.models import ContextInsensitiveEdge


class ContextInsensitiveCallGraph:
    """Procedures as nodes, call edges with contexts forgotten.

    Backed by a ``networkx.MultiDiGraph`` whose parallel edges are keyed by
    ``(instruction, kind)``, so a given ``(source, instruction, target, kind)``
    can only ever be stored once.
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._edges: list[ContextInsensitiveEdge] = []
        self._by_unit: dict[Any, list[ContextInsensitiveEdge]] = {}
        self._out_of: dict[Any, list[ContextInsensitiveEdge]] = {}
        self._into: dict[Any, list[ContextInsensitiveEdge]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add_procedure(self, procedure: Any) -> None:
        self._check_mutable()
        self._graph.add_node(procedure)

    def add_edge(self, edge: ContextInsensitiveEdge) -> bool:
        """Insert an edge unless an identical one is already present.

        Returns:
            True if the edge was new.
        """
        self._check_mutable()
        key = (edge.instruction, edge.kind)
        if self._graph.has_edge(edge.source, edge.target, key):
            return False
        self._graph.add_edge(edge.source, edge.target, key=key, edge=edge)
        self._edges.append(edge)
        self._by_unit.setdefault(edge.instruction, []).append(edge)
        self._out_of.setdefault(edge.source, []).append(edge)
        self._into.setdefault(edge.target, []).append(edge)
        return True

    def freeze(self) -> None:
        self._check_mutable()
        nx.freeze(self._graph)
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise GraphFrozenError("context-insensitive call graph")

    # -- queries --------------------------------------------------------------

    def edges_out_of(self, procedure: Any) -> tuple[ContextInsensitiveEdge, ...]:
        """Edges leaving `procedure`, in insertion order."""
        return tuple(self._out_of.get(procedure, ()))

    def edges_into(self, procedure: Any) -> tuple[ContextInsensitiveEdge, ...]:
        return tuple(self._into.get(procedure, ()))

    def edges_out_of_unit(self, instruction: Any) -> tuple[ContextInsensitiveEdge, ...]:
        return tuple(self._by_unit.get(instruction, ()))

    def all_edges(self) -> tuple[ContextInsensitiveEdge, ...]:
        return tuple(self._edges)

    def procedures(self) -> tuple[Any, ...]:
        return tuple(self._graph.nodes)

    def to_networkx(self) -> nx.MultiDiGraph:
        """A read-only networkx view for downstream traversal."""
        if self._frozen:
            return self._graph
        return nx.freeze(self._graph.copy())

    def get_stats(self) -> dict:
        kinds: dict[str, int] = {}
        for edge in self._edges:
            kinds[edge.kind.value] = kinds.get(edge.kind.value, 0) + 1
        return {
            "procedures": self._graph.number_of_nodes(),
            "edges": len(self._edges),
            "edge_kinds": kinds,
        }

    def __len__(self) -> int:
        return len(self._edges)

    def __contains__(self, edge: object) -> bool:
        if not isinstance(edge, ContextInsensitiveEdge):
            return False
        return self._graph.has_edge(edge.source, edge.target, (edge.instruction, edge.kind))

    def __iter__(self):
        return iter(self._edges)
