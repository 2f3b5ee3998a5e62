"""Context-sensitive and context-insensitive call graphs."""

from ctxgraph.graph.classifier import EdgeClassifier, classify
from ctxgraph.graph.index import CallGraphIndexBuilder
from ctxgraph.graph.insensitive import ContextInsensitiveCallGraph
from ctxgraph.graph.models import CallKind, ContextInsensitiveEdge, ContextSensitiveEdge
from ctxgraph.graph.registry import CallGraphRegistry
from ctxgraph.graph.sensitive import ContextSensitiveCallGraph
from ctxgraph.graph.transformer import CallGraphs, CallGraphTransformer, build_call_graphs

__all__ = [
    "CallGraphIndexBuilder",
    "CallGraphRegistry",
    "CallGraphs",
    "CallGraphTransformer",
    "CallKind",
    "ContextInsensitiveCallGraph",
    "ContextInsensitiveEdge",
    "ContextSensitiveCallGraph",
    "ContextSensitiveEdge",
    "EdgeClassifier",
    "build_call_graphs",
    "classify",
]
