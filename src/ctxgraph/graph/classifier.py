"""Classify call instructions into call kinds.

The host program decides what kind of invocation an instruction is; this
module only maps the host's answer onto :class:`CallKind`. Anything it does
not recognize is reported as ``CallKind.INVALID`` rather than raising.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable

from ctxgraph.config import ClassifierConfig
from ctxgraph.graph.models import CallKind

logger = logging.getLogger("ctxgraph.classifier")

_KINDS_BY_VALUE = {k.value: k for k in CallKind}


def _default_resolver(instruction: Any) -> Any:
    """Read the host's invocation kind off an instruction."""
    if isinstance(instruction, Mapping):
        return instruction.get("kind")
    return getattr(instruction, "invoke_kind", None)


class EdgeClassifier:
    """Maps call instructions to :class:`CallKind`.

    Args:
        config: Alias table and strictness settings.
        resolver: Optional callable returning the host's kind for an
            instruction (a ``CallKind``, a string, or ``None``).
    """

    def __init__(
        self,
        config: ClassifierConfig | None = None,
        resolver: Callable[[Any], Any] | None = None,
    ) -> None:
        self.config = config or ClassifierConfig()
        self._resolver = resolver or _default_resolver
        self._aliases: dict[str, CallKind] = {}
        for alias, kind in self.config.kind_aliases.items():
            resolved = _KINDS_BY_VALUE.get(kind.strip().lower())
            if resolved is not None:
                self._aliases[alias.strip().lower()] = resolved

    def classify(self, instruction: Any) -> CallKind:
        try:
            raw = self._resolver(instruction)
        except Exception as e:
            level = logging.WARNING if self.config.strict else logging.DEBUG
            logger.log(level, f"Could not resolve call kind of {instruction!r}: {e}")
            return CallKind.INVALID
        kind = self._lookup(raw)
        if kind is CallKind.INVALID and self.config.strict:
            logger.warning(f"Instruction {instruction!r} is not a recognized call")
        return kind

    def _lookup(self, raw: Any) -> CallKind:
        if isinstance(raw, CallKind):
            return raw
        if not isinstance(raw, str):
            return CallKind.INVALID
        name = raw.strip().lower()
        return _KINDS_BY_VALUE.get(name) or self._aliases.get(name, CallKind.INVALID)

    __call__ = classify


_default_classifier = EdgeClassifier()


def classify(instruction: Any) -> CallKind:
    """Classify an instruction with the default alias table."""
    return _default_classifier.classify(instruction)
