"""Edge models for the context-sensitive and context-insensitive call graphs."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from ctxgraph.analysis.models import CallSite


class CallKind(str, Enum):
    """How a call instruction dispatches to its target."""

    VIRTUAL = "virtual"
    STATIC = "static"
    SPECIAL = "special"
    INVALID = "invalid"  # not a real invocation


class ContextInsensitiveEdge(BaseModel):
    """A call edge with the contexts forgotten."""

    model_config = ConfigDict(frozen=True)

    source: Any
    instruction: Any
    target: Any
    kind: CallKind

    def __str__(self) -> str:
        return f"{self.source} --[{self.instruction}:{self.kind.value}]--> {self.target}"


class ContextSensitiveEdge(BaseModel):
    """A call edge that keeps the context on both endpoints."""

    model_config = ConfigDict(frozen=True)

    source: Any
    source_context: Any
    instruction: Any
    target: Any
    target_context: Any
    kind: CallKind

    @property
    def call_site(self) -> CallSite:
        return CallSite(calling_context=self.source_context, call_node=self.instruction)

    def to_insensitive(self) -> ContextInsensitiveEdge:
        """Project this edge onto the context-insensitive graph."""
        return ContextInsensitiveEdge(
            source=self.source,
            instruction=self.instruction,
            target=self.target,
            kind=self.kind,
        )

    def __str__(self) -> str:
        return (
            f"{self.source}[{self.source_context}] --[{self.instruction}:{self.kind.value}]--> "
            f"{self.target}[{self.target_context}]"
        )
