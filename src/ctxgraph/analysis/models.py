"""Data models for the results of a context-sensitive analysis.

The analysis engine itself lives elsewhere. What it hands over is a
context transition table: for every call site (a calling context plus a
call instruction), the target procedures it reaches and the context each
target is analyzed in. The protocols below describe that hand-over; the
concrete models are a ready-made in-memory implementation.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


@runtime_checkable
class AnalysisContext(Protocol):
    """A calling environment for one procedure. Hashed and compared by value."""

    def get_method(self) -> Any: ...


@runtime_checkable
class AnalysisCallSite(Protocol):
    """A context-sensitive invocation point."""

    def get_calling_context(self) -> AnalysisContext: ...

    def get_call_node(self) -> Any: ...


@runtime_checkable
class TransitionTableSource(Protocol):
    """Anything exposing a finished analysis' procedures and transitions."""

    def get_methods(self) -> Iterable[Any]: ...

    def get_transitions(self) -> Mapping[Any, Mapping[Any, AnalysisContext]]: ...


class MethodContext(BaseModel):
    """A context identified by its procedure plus an analysis-defined value."""

    model_config = ConfigDict(frozen=True)

    method: Any
    value: Any = None

    def get_method(self) -> Any:
        return self.method

    def __str__(self) -> str:
        return f"{self.method}@{self.value}"


class Instruction(BaseModel):
    """A call instruction in the host program.

    ``invoke_kind`` is the host's own name for the invocation flavour
    (e.g. "virtual", "invokestatic"); ``None`` marks a non-call unit.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    invoke_kind: str | None = None

    def __str__(self) -> str:
        return self.id


class CallSite(BaseModel):
    """Composite key: (calling context, call instruction)."""

    model_config = ConfigDict(frozen=True)

    calling_context: Any
    call_node: Any

    def get_calling_context(self) -> Any:
        return self.calling_context

    def get_call_node(self) -> Any:
        return self.call_node

    def sort_key(self) -> tuple[str, str]:
        """Stable ordering for display, independent of hash order."""
        return (str(self.calling_context), str(self.call_node))

    def __str__(self) -> str:
        return f"{self.calling_context}:{self.call_node}"


class TransitionTable:
    """In-memory context transition table.

    Maps each call site to ``{target procedure: target context}`` and keeps
    the set of procedures the analysis knows about, including those that
    never make a call.
    """

    def __init__(self) -> None:
        self._methods: dict[Any, None] = {}
        self._transitions: dict[Any, dict[Any, Any]] = {}

    def add_method(self, method: Any) -> None:
        self._methods.setdefault(method, None)

    def add_transition(self, call_site: Any, target: Any, target_context: Any) -> None:
        """Record that ``call_site`` reaches ``target`` analyzed in ``target_context``."""
        source = call_site.get_calling_context().get_method()
        if source is not None:
            self.add_method(source)
        self.add_method(target)
        self._transitions.setdefault(call_site, {})[target] = target_context

    def get_methods(self) -> list[Any]:
        return list(self._methods)

    def get_transitions(self) -> dict[Any, dict[Any, Any]]:
        return self._transitions

    def get_targets(self, call_site: Any) -> dict[Any, Any]:
        """Targets of one call site (empty if the site is unknown)."""
        return dict(self._transitions.get(call_site, {}))

    def get_callers(self, target_context: Any) -> list[Any]:
        """Call sites that resume in ``target_context``."""
        return [
            cs for cs, targets in self._transitions.items()
            if target_context in targets.values()
        ]

    def __len__(self) -> int:
        return sum(len(targets) for targets in self._transitions.values())
