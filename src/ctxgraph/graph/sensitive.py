"""Read-only view over the context-sensitive call graph indices."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from ctxgraph.analysis.models import CallSite
from ctxgraph.graph.models import ContextSensitiveEdge

EdgeSeq = tuple[ContextSensitiveEdge, ...]


class ContextSensitiveCallGraph:
    """Frozen context-sensitive call graph.

    Built once by :class:`~ctxgraph.graph.index.CallGraphIndexBuilder` and
    never modified afterwards, so it can be shared between threads without
    locking. Every query is a dictionary lookup returning the stored bucket;
    an unknown key yields an empty tuple.
    """

    def __init__(
        self,
        out_of_context: Mapping[Any, EdgeSeq],
        out_of_call_site: Mapping[CallSite, EdgeSeq],
        into_context: Mapping[Any, EdgeSeq],
        edges: EdgeSeq,
        procedures: tuple[Any, ...],
    ) -> None:
        self._out_of_context = dict(out_of_context)
        self._out_of_call_site = dict(out_of_call_site)
        self._into_context = dict(into_context)
        self._edges = edges
        self._procedures = procedures

    def edges_out_of_call_site(self, context: Any, instruction: Any) -> EdgeSeq:
        """Edges leaving exactly the call site ``(context, instruction)``."""
        return self._out_of_call_site.get(
            CallSite(calling_context=context, call_node=instruction), ()
        )

    def edges_out_of_context(self, context: Any) -> EdgeSeq:
        """Edges leaving any call site within ``context``."""
        return self._out_of_context.get(context, ())

    def edges_into_context(self, context: Any) -> EdgeSeq:
        """Edges resuming in ``context``."""
        return self._into_context.get(context, ())

    def all_edges(self) -> EdgeSeq:
        return self._edges

    def all_procedures(self) -> tuple[Any, ...]:
        """Every procedure known to the analysis, with or without edges."""
        return self._procedures

    def has_context(self, context: Any) -> bool:
        """Whether ``context`` occurs on either end of some edge."""
        return context in self._out_of_context or context in self._into_context

    def contexts(self) -> tuple[Any, ...]:
        seen = dict.fromkeys(self._out_of_context)
        seen.update(dict.fromkeys(self._into_context))
        return tuple(seen)

    def call_sites(self) -> tuple[CallSite, ...]:
        return tuple(self._out_of_call_site)

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[ContextSensitiveEdge]:
        return iter(self._edges)
