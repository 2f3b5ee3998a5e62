"""Accumulate context-sensitive edges into lookup indices."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ctxgraph.analysis.models import CallSite
from ctxgraph.exceptions import GraphFrozenError
from ctxgraph.graph.models import ContextSensitiveEdge
from ctxgraph.graph.sensitive import ContextSensitiveCallGraph


class CallGraphIndexBuilder:
    """Builds the three edge indices behind a context-sensitive call graph.

    Each edge is appended to one bucket in each index:

    - by source context
    - by call site ``(source context, instruction)``
    - by target context

    Buckets are created on first insertion and keep insertion order.
    :meth:`freeze` hands the finished indices to an immutable
    :class:`ContextSensitiveCallGraph`; the builder accepts nothing after that.
    """

    def __init__(self) -> None:
        self._out_of_context: dict[Any, list[ContextSensitiveEdge]] = {}
        self._out_of_call_site: dict[CallSite, list[ContextSensitiveEdge]] = {}
        self._into_context: dict[Any, list[ContextSensitiveEdge]] = {}
        self._edges: list[ContextSensitiveEdge] = []
        self._procedures: dict[Any, None] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def set_procedures(self, procedures: Iterable[Any]) -> None:
        """Register the analysis' procedure set (including procedures that make no calls)."""
        self._check_mutable()
        for procedure in procedures:
            self._procedures.setdefault(procedure, None)

    def add_edge(self, edge: ContextSensitiveEdge) -> None:
        self._check_mutable()
        self._edges.append(edge)
        self._out_of_context.setdefault(edge.source_context, []).append(edge)
        self._out_of_call_site.setdefault(edge.call_site, []).append(edge)
        self._into_context.setdefault(edge.target_context, []).append(edge)
        self._procedures.setdefault(edge.source, None)
        self._procedures.setdefault(edge.target, None)

    def all_edges(self) -> tuple[ContextSensitiveEdge, ...]:
        return tuple(self._edges)

    def all_source_procedures(self) -> tuple[Any, ...]:
        return tuple(self._procedures)

    def freeze(self) -> ContextSensitiveCallGraph:
        """Seal the indices and return the read-only view over them."""
        self._check_mutable()
        self._frozen = True
        return ContextSensitiveCallGraph(
            out_of_context={k: tuple(v) for k, v in self._out_of_context.items()},
            out_of_call_site={k: tuple(v) for k, v in self._out_of_call_site.items()},
            into_context={k: tuple(v) for k, v in self._into_context.items()},
            edges=tuple(self._edges),
            procedures=tuple(self._procedures),
        )

    def _check_mutable(self) -> None:
        if self._frozen:
            raise GraphFrozenError("context-sensitive call graph")

    def get_stats(self) -> dict:
        """Get index statistics."""
        kinds: dict[str, int] = {}
        for edge in self._edges:
            kinds[edge.kind.value] = kinds.get(edge.kind.value, 0) + 1
        contexts = set(self._out_of_context) | set(self._into_context)
        return {
            "procedures": len(self._procedures),
            "edges": len(self._edges),
            "contexts": len(contexts),
            "call_sites": len(self._out_of_call_site),
            "edge_kinds": kinds,
        }
