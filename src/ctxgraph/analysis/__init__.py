"""Inputs handed over by a context-sensitive analysis."""

from ctxgraph.analysis.loader import load_transition_table, parse_transition_table
from ctxgraph.analysis.models import (
    AnalysisCallSite,
    AnalysisContext,
    CallSite,
    Instruction,
    MethodContext,
    TransitionTable,
    TransitionTableSource,
)

__all__ = [
    "AnalysisCallSite",
    "AnalysisContext",
    "CallSite",
    "Instruction",
    "MethodContext",
    "TransitionTable",
    "TransitionTableSource",
    "load_transition_table",
    "parse_transition_table",
]
