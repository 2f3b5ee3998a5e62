"""Read context transition tables from JSON documents.

Document layout::

    {
      "methods": ["Main.main", "A.foo"],
      "contexts": [{"id": "c0", "method": "Main.main", "value": "..."}],
      "transitions": [
        {"context": "c0", "node": "main:3", "kind": "static",
         "targets": {"A.foo": "c1"}}
      ]
    }

Procedures are identified by name, contexts by their ``id``, and call
instructions by ``node``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ctxgraph.analysis.models import CallSite, Instruction, MethodContext, TransitionTable
from ctxgraph.exceptions import LoaderError, TransitionTableError


class ContextDoc(BaseModel):
    id: str
    method: str | None = None
    value: str | int | None = None


class TransitionDoc(BaseModel):
    context: str
    node: str
    kind: str | None = None
    targets: dict[str, str] = Field(default_factory=dict)


class TransitionTableDoc(BaseModel):
    """Top-level transition table document."""

    methods: list[str] = Field(default_factory=list)
    contexts: list[ContextDoc] = Field(default_factory=list)
    transitions: list[TransitionDoc] = Field(default_factory=list)


@dataclass
class LoadedTransitionTable:
    """A parsed table plus lookups from document ids to the created objects."""

    table: TransitionTable
    contexts: dict[str, MethodContext] = field(default_factory=dict)
    instructions: dict[str, Instruction] = field(default_factory=dict)


def parse_transition_table(data: dict[str, Any]) -> LoadedTransitionTable:
    """Build a :class:`TransitionTable` from a decoded JSON document."""
    try:
        doc = TransitionTableDoc.model_validate(data)
    except ValidationError as e:
        raise LoaderError(f"Invalid transition table document: {e}") from e

    loaded = LoadedTransitionTable(table=TransitionTable())
    for method in doc.methods:
        loaded.table.add_method(method)

    for ctx in doc.contexts:
        if ctx.id in loaded.contexts:
            raise LoaderError(f"Duplicate context id: {ctx.id}")
        value = ctx.value if ctx.value is not None else ctx.id
        loaded.contexts[ctx.id] = MethodContext(method=ctx.method, value=value)

    for tr in doc.transitions:
        source_context = _lookup_context(loaded, tr.context)
        instruction = loaded.instructions.get(tr.node)
        if instruction is None:
            instruction = Instruction(id=tr.node, invoke_kind=tr.kind)
            loaded.instructions[tr.node] = instruction
        elif instruction.invoke_kind != tr.kind:
            raise LoaderError(
                f"Node '{tr.node}' is declared as both "
                f"'{instruction.invoke_kind}' and '{tr.kind}'"
            )

        call_site = CallSite(calling_context=source_context, call_node=instruction)
        for target, target_ctx_id in tr.targets.items():
            target_context = _lookup_context(loaded, target_ctx_id)
            loaded.table.add_transition(call_site, target, target_context)

    return loaded


def load_transition_table(path: str | Path) -> LoadedTransitionTable:
    """Load a transition table document from disk."""
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except OSError as e:
        raise LoaderError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LoaderError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise LoaderError(f"{path} must contain a JSON object")
    return parse_transition_table(data)


def _lookup_context(loaded: LoadedTransitionTable, ctx_id: str) -> MethodContext:
    try:
        return loaded.contexts[ctx_id]
    except KeyError:
        raise TransitionTableError(f"Unknown context id: {ctx_id}") from None
