"""Tests for building call graphs from a transition table."""

from __future__ import annotations

import logging

import pytest

from ctxgraph.analysis.models import CallSite, Instruction, MethodContext, TransitionTable
from ctxgraph.config import ClassifierConfig, ProjectConfig
from ctxgraph.exceptions import GraphFrozenError, TransitionTableError
from ctxgraph.graph.classifier import EdgeClassifier
from ctxgraph.graph.models import CallKind, ContextInsensitiveEdge, ContextSensitiveEdge
from ctxgraph.graph.registry import CallGraphRegistry
from ctxgraph.graph.transformer import CallGraphTransformer, build_call_graphs


def _site(context, instruction) -> CallSite:
    return CallSite(calling_context=context, call_node=instruction)


class TestScenarios:
    def test_single_call(self):
        ctx_a = MethodContext(method="P1", value="A")
        ctx_b = MethodContext(method="P2", value="B")
        instr_a = Instruction(id="instrA", invoke_kind="static")
        table = TransitionTable()
        table.add_transition(_site(ctx_a, instr_a), "P2", ctx_b)

        graphs = build_call_graphs(table)
        cs = graphs.context_sensitive_call_graph

        expected = ContextSensitiveEdge(
            source="P1", source_context=ctx_a, instruction=instr_a,
            target="P2", target_context=ctx_b, kind=CallKind.STATIC,
        )
        assert cs.all_edges() == (expected,)
        assert cs.edges_out_of_context(ctx_a) == (expected,)
        assert cs.edges_out_of_call_site(ctx_a, instr_a) == (expected,)
        assert cs.edges_into_context(ctx_b) == (expected,)
        assert graphs.call_graph.all_edges() == (
            ContextInsensitiveEdge(source="P1", instruction=instr_a, target="P2", kind=CallKind.STATIC),
        )

    def test_two_contexts_collapse(self):
        ctx_a1 = MethodContext(method="P1", value=1)
        ctx_a2 = MethodContext(method="P1", value=2)
        ctx_b = MethodContext(method="P2", value="B")
        instr = Instruction(id="P1:7", invoke_kind="virtual")
        table = TransitionTable()
        table.add_transition(_site(ctx_a1, instr), "P2", ctx_b)
        table.add_transition(_site(ctx_a2, instr), "P2", ctx_b)

        graphs = build_call_graphs(table)

        assert len(graphs.context_sensitive_call_graph.all_edges()) == 2
        assert len(graphs.context_sensitive_call_graph.edges_into_context(ctx_b)) == 2
        assert len(graphs.call_graph) == 1
        assert graphs.stats["collapsed_edges"] == 1

    def test_call_site_with_several_targets(self):
        ctx_a = MethodContext(method="P1", value="A")
        ctx_b = MethodContext(method="P2", value="B")
        ctx_c = MethodContext(method="P3", value="C")
        instr = Instruction(id="P1:3", invoke_kind="virtual")
        table = TransitionTable()
        table.add_transition(_site(ctx_a, instr), "P2", ctx_b)
        table.add_transition(_site(ctx_a, instr), "P3", ctx_c)

        graphs = build_call_graphs(table)
        cs = graphs.context_sensitive_call_graph

        bucket = cs.edges_out_of_call_site(ctx_a, instr)
        assert [e.target for e in bucket] == ["P2", "P3"]
        assert [e.target_context for e in bucket] == [ctx_b, ctx_c]
        assert {e.kind for e in bucket} == {CallKind.VIRTUAL}
        assert cs.edges_out_of_context(ctx_a) == bucket
        assert cs.edges_into_context(ctx_c) == bucket[1:]
        assert [e.target for e in graphs.call_graph.edges_out_of("P1")] == ["P2", "P3"]
        assert graphs.stats["collapsed_edges"] == 0

    def test_procedure_without_calls(self, sample_table: TransitionTable):
        graphs = build_call_graphs(sample_table)
        cs = graphs.context_sensitive_call_graph
        lonely_ctx = MethodContext(method="Util.unused", value=None)

        assert "Util.unused" in cs.all_procedures()
        assert cs.edges_out_of_context(lonely_ctx) == ()
        assert cs.edges_into_context(lonely_ctx) == ()
        assert cs.edges_out_of_call_site(lonely_ctx, Instruction(id="unused:1")) == ()
        assert "Util.unused" in graphs.call_graph.procedures()
        assert graphs.call_graph.edges_out_of("Util.unused") == ()


class TestProperties:
    def test_index_completeness(self, sample_table: TransitionTable):
        cs = build_call_graphs(sample_table).context_sensitive_call_graph
        for edge in cs.all_edges():
            assert cs.edges_out_of_context(edge.source_context).count(edge) == 1
            assert cs.edges_out_of_call_site(edge.source_context, edge.instruction).count(edge) == 1
            assert cs.edges_into_context(edge.target_context).count(edge) == 1

        total_out = sum(len(cs.edges_out_of_context(c)) for c in cs.contexts())
        total_in = sum(len(cs.edges_into_context(c)) for c in cs.contexts())
        assert total_out == total_in == len(cs.all_edges())

    def test_insensitive_graph_has_unique_tuples(self, sample_table: TransitionTable):
        graphs = build_call_graphs(sample_table)
        edges = graphs.call_graph.all_edges()
        assert len(edges) == len(set(edges))
        # helper:1 is reached from two helper contexts but stored once
        assert len(graphs.call_graph.edges_into("Log.write")) == 1
        assert len(graphs.context_sensitive_call_graph.all_edges()) == 6
        assert len(edges) == 5

    def test_all_procedures_cover_edge_endpoints(self, sample_table: TransitionTable):
        cs = build_call_graphs(sample_table).context_sensitive_call_graph
        procedures = set(cs.all_procedures())
        for edge in cs.all_edges():
            assert edge.source in procedures
            assert edge.target in procedures

    def test_endpoint_contexts_match_table(self, sample_table: TransitionTable):
        cs = build_call_graphs(sample_table).context_sensitive_call_graph
        transitions = sample_table.get_transitions()
        for edge in cs.all_edges():
            site = _site(edge.source_context, edge.instruction)
            assert transitions[site][edge.target] == edge.target_context

    def test_idempotent(self, sample_table: TransitionTable):
        first = build_call_graphs(sample_table)
        second = build_call_graphs(sample_table)
        assert set(first.context_sensitive_call_graph.all_edges()) == set(
            second.context_sensitive_call_graph.all_edges()
        )
        assert set(first.call_graph.all_edges()) == set(second.call_graph.all_edges())

    def test_order_independent(self, sample_table: TransitionTable):
        reversed_table = TransitionTable()
        for method in reversed(sample_table.get_methods()):
            reversed_table.add_method(method)
        for site, targets in reversed(list(sample_table.get_transitions().items())):
            for target, context in targets.items():
                reversed_table.add_transition(site, target, context)

        a = build_call_graphs(sample_table)
        b = build_call_graphs(reversed_table)
        assert set(a.context_sensitive_call_graph.all_edges()) == set(
            b.context_sensitive_call_graph.all_edges()
        )
        assert set(a.call_graph.all_edges()) == set(b.call_graph.all_edges())
        assert set(a.context_sensitive_call_graph.all_procedures()) == set(
            b.context_sensitive_call_graph.all_procedures()
        )


class TestFrozenResult:
    def test_graphs_are_frozen(self, sample_table: TransitionTable):
        graphs = build_call_graphs(sample_table)
        assert graphs.call_graph.frozen
        with pytest.raises(GraphFrozenError):
            graphs.call_graph.add_procedure("Late")


class TestMalformedEntries:
    def test_non_call_instruction_becomes_invalid_edge(self):
        ctx_a = MethodContext(method="P1", value="A")
        ctx_b = MethodContext(method="P2", value="B")
        table = TransitionTable()
        table.add_transition(_site(ctx_a, Instruction(id="nop")), "P2", ctx_b)

        graphs = build_call_graphs(table)
        (edge,) = graphs.context_sensitive_call_graph.all_edges()
        assert edge.kind is CallKind.INVALID
        assert graphs.call_graph.all_edges()[0].kind is CallKind.INVALID

    def test_failing_resolver_yields_invalid_edges(self, sample_table: TransitionTable):
        registry = CallGraphRegistry()
        classifier = EdgeClassifier(resolver=lambda unit: unit.opcode)
        graphs = CallGraphTransformer(classifier=classifier, registry=registry).transform(
            sample_table
        )

        assert len(graphs.context_sensitive_call_graph) == 6
        assert graphs.stats["edge_kinds"] == {"invalid": 6}
        assert registry.call_graph is graphs.call_graph

    def test_unresolvable_context_aborts(self, sample_table: TransitionTable):
        registry = CallGraphRegistry()
        broken = MethodContext(method=None, value="?")
        sample_table.add_transition(
            _site(broken, Instruction(id="x:1", invoke_kind="static")),
            "Log.write",
            MethodContext(method="Log.write", value=3),
        )
        transformer = CallGraphTransformer(registry=registry)

        with pytest.raises(TransitionTableError):
            transformer.transform(sample_table)
        assert registry.call_graph is None
        assert registry.context_sensitive_call_graph is None
        assert transformer.analysis is None

    def test_context_without_get_method_aborts(self):
        class BareContext:
            pass

        class Analysis:
            def get_methods(self):
                return []

            def get_transitions(self):
                return {_site(BareContext(), Instruction(id="x")): {"P2": "ctx"}}

        with pytest.raises(TransitionTableError):
            build_call_graphs(Analysis())

    def test_undecomposable_call_site_aborts(self):
        class Analysis:
            def get_methods(self):
                return ["P1"]

            def get_transitions(self):
                return {("ctx", "instr"): {"P2": "ctx2"}}

        with pytest.raises(TransitionTableError):
            build_call_graphs(Analysis())

    def test_abort_is_logged(self, caplog: pytest.LogCaptureFixture):
        table = TransitionTable()
        table.add_transition(
            _site(MethodContext(method=None), Instruction(id="x")), "P2", MethodContext(method="P2")
        )
        with caplog.at_level(logging.ERROR, logger="ctxgraph.transformer"):
            with pytest.raises(TransitionTableError):
                build_call_graphs(table)
        assert "Aborting" in caplog.text


class TestCallGraphTransformer:
    def test_registers_on_success(self, sample_table: TransitionTable):
        registry = CallGraphRegistry()
        transformer = CallGraphTransformer(registry=registry)
        graphs = transformer.transform(sample_table)

        assert registry.call_graph is graphs.call_graph
        assert registry.context_sensitive_call_graph is graphs.context_sensitive_call_graph
        assert transformer.analysis is sample_table

    def test_registry_clear(self, sample_table: TransitionTable):
        registry = CallGraphRegistry()
        build_call_graphs(sample_table, registry=registry)
        registry.clear()
        assert registry.call_graph is None

    def test_stats(self, sample_table: TransitionTable):
        transformer = CallGraphTransformer()
        graphs = transformer.transform(sample_table)
        stats = transformer.last_stats

        assert stats is graphs.stats
        assert stats["edges"] == 6
        assert stats["context_insensitive_edges"] == 5
        assert stats["call_sites"] == 5
        assert stats["contexts"] == 6
        assert stats["procedures"] == 6
        assert stats["edge_kinds"] == {"static": 2, "virtual": 4}
        assert stats["build_time_ms"] >= 0

    def test_config_drives_classifier(self):
        ctx_a = MethodContext(method="P1", value="A")
        table = TransitionTable()
        table.add_transition(
            _site(ctx_a, Instruction(id="i", invoke_kind="dyn")), "P2", MethodContext(method="P2")
        )
        config = ProjectConfig(classifier=ClassifierConfig(kind_aliases={"dyn": "virtual"}))
        graphs = CallGraphTransformer(config=config).transform(table)
        assert graphs.call_graph.all_edges()[0].kind is CallKind.VIRTUAL

    def test_explicit_classifier(self, sample_table: TransitionTable):
        classifier = EdgeClassifier(resolver=lambda unit: "special")
        graphs = CallGraphTransformer(classifier=classifier).transform(sample_table)
        kinds = {e.kind for e in graphs.context_sensitive_call_graph.all_edges()}
        assert kinds == {CallKind.SPECIAL}

    def test_logs_summary(self, sample_table: TransitionTable, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.INFO, logger="ctxgraph.transformer"):
            build_call_graphs(sample_table)
        assert "5 call sites" in caplog.text
        assert "6 context-sensitive edges" in caplog.text
