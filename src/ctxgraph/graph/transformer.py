"""Turn a context transition table into call graphs."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ctxgraph.analysis.models import TransitionTableSource
from ctxgraph.config import ProjectConfig
from ctxgraph.exceptions import TransitionTableError
from ctxgraph.graph.classifier import EdgeClassifier
from ctxgraph.graph.index import CallGraphIndexBuilder
from ctxgraph.graph.insensitive import ContextInsensitiveCallGraph
from ctxgraph.graph.models import ContextSensitiveEdge
from ctxgraph.graph.registry import CallGraphRegistry
from ctxgraph.graph.sensitive import ContextSensitiveCallGraph

logger = logging.getLogger("ctxgraph.transformer")


@dataclass
class CallGraphs:
    """The two views produced by one transformation."""

    call_graph: ContextInsensitiveCallGraph
    context_sensitive_call_graph: ContextSensitiveCallGraph
    stats: dict = field(default_factory=dict)


class CallGraphTransformer:
    """Builds call graphs from the transitions recorded by an analysis.

    One pass over the transition table creates a context-sensitive edge for
    every ``(call site, target)`` pair and projects it onto the
    context-insensitive graph. Both graphs are frozen at the end of the pass
    and, if a registry was given, registered there.

    A table that references a context without a resolvable procedure aborts
    the pass with :class:`TransitionTableError`; nothing is frozen or
    registered in that case.
    """

    def __init__(
        self,
        classifier: EdgeClassifier | None = None,
        registry: CallGraphRegistry | None = None,
        config: ProjectConfig | None = None,
    ) -> None:
        config = config or ProjectConfig()
        self.classifier = classifier or EdgeClassifier(config.classifier)
        self.registry = registry
        self._analysis: TransitionTableSource | None = None
        self._last_stats: dict = {}

    @property
    def analysis(self) -> TransitionTableSource | None:
        """The analysis result consumed by the last successful transformation."""
        return self._analysis

    @property
    def last_stats(self) -> dict:
        return self._last_stats

    def transform(self, analysis: TransitionTableSource) -> CallGraphs:
        """Build both call graphs from ``analysis``.

        Args:
            analysis: Anything exposing ``get_methods()`` and ``get_transitions()``.

        Returns:
            The frozen context-insensitive and context-sensitive call graphs.
        """
        start_time = time.time()
        index = CallGraphIndexBuilder()
        call_graph = ContextInsensitiveCallGraph()

        methods = list(analysis.get_methods())
        index.set_procedures(methods)
        for method in methods:
            call_graph.add_procedure(method)

        transitions = analysis.get_transitions()
        logger.info(
            f"Building call graphs from {len(transitions)} call sites "
            f"over {len(methods)} procedures"
        )

        try:
            collapsed = self._materialize(transitions, index, call_graph)
        except TransitionTableError as e:
            logger.error(f"Aborting call graph construction: {e}")
            raise

        cs_call_graph = index.freeze()
        call_graph.freeze()

        stats = index.get_stats()
        stats["context_insensitive_edges"] = len(call_graph)
        stats["collapsed_edges"] = collapsed
        stats["build_time_ms"] = round((time.time() - start_time) * 1000, 2)
        logger.info(
            f"Built {stats['edges']} context-sensitive edges "
            f"({len(call_graph)} context-insensitive) in {stats['build_time_ms']}ms"
        )

        graphs = CallGraphs(
            call_graph=call_graph,
            context_sensitive_call_graph=cs_call_graph,
            stats=stats,
        )
        self._analysis = analysis
        self._last_stats = stats
        if self.registry is not None:
            self.registry.register(graphs)
        return graphs

    def _materialize(
        self,
        transitions: Mapping[Any, Mapping[Any, Any]],
        index: CallGraphIndexBuilder,
        call_graph: ContextInsensitiveCallGraph,
    ) -> int:
        """Create edges for every transition. Returns the number of collapsed CI edges."""
        collapsed = 0
        for call_site, targets in transitions.items():
            source_context, instruction = self._decompose(call_site)
            source = self._resolve_method(source_context, call_site)
            kind = self.classifier.classify(instruction)
            if not isinstance(targets, Mapping):
                raise TransitionTableError(
                    f"Targets of call site {call_site} are not a mapping: {targets!r}"
                )

            for target, target_context in targets.items():
                edge = ContextSensitiveEdge(
                    source=source,
                    source_context=source_context,
                    instruction=instruction,
                    target=target,
                    target_context=target_context,
                    kind=kind,
                )
                index.add_edge(edge)
                if not call_graph.add_edge(edge.to_insensitive()):
                    collapsed += 1
                logger.debug(f"Added edge {edge}")
        return collapsed

    @staticmethod
    def _decompose(call_site: Any) -> tuple[Any, Any]:
        try:
            return call_site.get_calling_context(), call_site.get_call_node()
        except AttributeError as e:
            raise TransitionTableError(
                f"Call site {call_site!r} does not expose a calling context and call node"
            ) from e

    @staticmethod
    def _resolve_method(context: Any, call_site: Any) -> Any:
        get_method = getattr(context, "get_method", None)
        if get_method is None:
            raise TransitionTableError(
                f"Calling context {context!r} of call site {call_site} has no procedure"
            )
        method = get_method()
        if method is None:
            raise TransitionTableError(
                f"Calling context {context!r} of call site {call_site} has no procedure"
            )
        return method


def build_call_graphs(
    analysis: TransitionTableSource,
    registry: CallGraphRegistry | None = None,
    config: ProjectConfig | None = None,
) -> CallGraphs:
    """Convenience wrapper: transform ``analysis`` with a fresh transformer."""
    return CallGraphTransformer(registry=registry, config=config).transform(analysis)
