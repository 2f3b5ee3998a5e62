"""ctxgraph - call graph views over context-sensitive analysis results."""

__version__ = "0.1.0"
