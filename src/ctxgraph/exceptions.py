"""Custom exceptions for ctxgraph."""


class CtxGraphError(Exception):
    """Base exception for all ctxgraph errors."""


class ConfigError(CtxGraphError):
    """Configuration-related errors."""


class GraphError(CtxGraphError):
    """Call graph construction errors."""


class GraphFrozenError(GraphError):
    """Raised when a frozen call graph is asked to accept more edges."""

    def __init__(self, what: str = "call graph"):
        super().__init__(f"The {what} is frozen and can no longer be modified")


class TransitionTableError(CtxGraphError):
    """The context transition table violates its contract.

    Raised when an entry cannot be turned into edges at all, e.g. a calling
    context whose procedure cannot be resolved. The whole transformation is
    aborted; no partially built graph is published.
    """


class LoaderError(CtxGraphError):
    """A transition table document could not be read or validated."""
