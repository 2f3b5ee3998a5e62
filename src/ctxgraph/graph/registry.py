"""Hand-over point for the finished call graphs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ctxgraph.graph.insensitive import ContextInsensitiveCallGraph
    from ctxgraph.graph.sensitive import ContextSensitiveCallGraph
    from ctxgraph.graph.transformer import CallGraphs


class CallGraphRegistry:
    """Holds the call graphs published for a program.

    Create one per program (or per test) and pass it to the transformer;
    there is no process-wide instance.
    """

    def __init__(self) -> None:
        self._call_graph: ContextInsensitiveCallGraph | None = None
        self._cs_call_graph: ContextSensitiveCallGraph | None = None

    @property
    def call_graph(self) -> ContextInsensitiveCallGraph | None:
        return self._call_graph

    @property
    def context_sensitive_call_graph(self) -> ContextSensitiveCallGraph | None:
        return self._cs_call_graph

    def set_call_graph(self, graph: ContextInsensitiveCallGraph) -> None:
        self._call_graph = graph

    def set_context_sensitive_call_graph(self, graph: ContextSensitiveCallGraph) -> None:
        self._cs_call_graph = graph

    def register(self, graphs: CallGraphs) -> None:
        self.set_call_graph(graphs.call_graph)
        self.set_context_sensitive_call_graph(graphs.context_sensitive_call_graph)

    def clear(self) -> None:
        self._call_graph = None
        self._cs_call_graph = None
