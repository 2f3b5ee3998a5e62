"""Shared test fixtures for ctxgraph."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ctxgraph.analysis.models import CallSite, Instruction, MethodContext, TransitionTable


@pytest.fixture
def sample_table() -> TransitionTable:
    """A small program analyzed with two contexts for `Util.helper`.

    main calls helper twice (from two call nodes, each with its own context)
    and helper calls log in the same context both times. main also has one
    interface call that may reach either `Circle.area` or `Square.area`.
    `Util.unused` is known to the analysis but never called.
    """
    table = TransitionTable()
    main_ctx = MethodContext(method="Main.main", value=0)
    helper_a = MethodContext(method="Util.helper", value=1)
    helper_b = MethodContext(method="Util.helper", value=2)
    log_ctx = MethodContext(method="Log.write", value=3)
    circle_ctx = MethodContext(method="Circle.area", value=4)
    square_ctx = MethodContext(method="Square.area", value=5)

    call_1 = Instruction(id="main:1", invoke_kind="static")
    call_2 = Instruction(id="main:2", invoke_kind="static")
    call_area = Instruction(id="main:3", invoke_kind="virtual")
    call_log = Instruction(id="helper:1", invoke_kind="virtual")

    table.add_method("Util.unused")
    table.add_transition(CallSite(calling_context=main_ctx, call_node=call_1), "Util.helper", helper_a)
    table.add_transition(CallSite(calling_context=main_ctx, call_node=call_2), "Util.helper", helper_b)
    area_site = CallSite(calling_context=main_ctx, call_node=call_area)
    table.add_transition(area_site, "Circle.area", circle_ctx)
    table.add_transition(area_site, "Square.area", square_ctx)
    table.add_transition(CallSite(calling_context=helper_a, call_node=call_log), "Log.write", log_ctx)
    table.add_transition(CallSite(calling_context=helper_b, call_node=call_log), "Log.write", log_ctx)
    return table


@pytest.fixture
def sample_document() -> dict:
    """A JSON transition table document."""
    return {
        "methods": [
            "Main.main", "Util.helper", "Log.write", "Circle.area", "Square.area", "Util.unused",
        ],
        "contexts": [
            {"id": "c0", "method": "Main.main"},
            {"id": "c1", "method": "Util.helper"},
            {"id": "c2", "method": "Util.helper"},
            {"id": "c3", "method": "Log.write"},
            {"id": "c4", "method": "Circle.area"},
            {"id": "c5", "method": "Square.area"},
        ],
        "transitions": [
            {"context": "c0", "node": "main:1", "kind": "static", "targets": {"Util.helper": "c1"}},
            {"context": "c0", "node": "main:2", "kind": "static", "targets": {"Util.helper": "c2"}},
            {"context": "c0", "node": "main:3", "kind": "invokeinterface",
             "targets": {"Circle.area": "c4", "Square.area": "c5"}},
            {"context": "c1", "node": "helper:1", "kind": "invokevirtual",
             "targets": {"Log.write": "c3"}},
            {"context": "c2", "node": "helper:1", "kind": "invokevirtual",
             "targets": {"Log.write": "c3"}},
        ],
    }


@pytest.fixture
def table_file(tmp_path: Path, sample_document: dict) -> Path:
    """The sample document written to disk."""
    path = tmp_path / "table.json"
    path.write_text(json.dumps(sample_document))
    return path
