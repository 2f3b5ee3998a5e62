#!/usr/bin/env python3
"""Demo: Using ctxgraph as a Python library.

Builds a tiny transition table by hand, as an analysis would, and queries
both call graphs produced from it.
"""

from ctxgraph.analysis.models import CallSite, Instruction, MethodContext, TransitionTable
from ctxgraph.graph.registry import CallGraphRegistry
from ctxgraph.graph.transformer import CallGraphTransformer


def main():
    # 1. Record the analysis result: main calls helper from two contexts
    table = TransitionTable()
    main_ctx = MethodContext(method="Main.main", value="entry")
    helper_x = MethodContext(method="Util.helper", value="x:int")
    helper_y = MethodContext(method="Util.helper", value="y:str")
    log_ctx = MethodContext(method="Log.write", value="any")

    call_x = Instruction(id="main:10", invoke_kind="static")
    call_y = Instruction(id="main:11", invoke_kind="static")
    call_log = Instruction(id="helper:3", invoke_kind="invokevirtual")

    table.add_method("Util.unused")
    table.add_transition(CallSite(calling_context=main_ctx, call_node=call_x), "Util.helper", helper_x)
    table.add_transition(CallSite(calling_context=main_ctx, call_node=call_y), "Util.helper", helper_y)
    table.add_transition(CallSite(calling_context=helper_x, call_node=call_log), "Log.write", log_ctx)
    table.add_transition(CallSite(calling_context=helper_y, call_node=call_log), "Log.write", log_ctx)

    # 2. Build and register the call graphs
    print("Building call graphs...")
    registry = CallGraphRegistry()
    transformer = CallGraphTransformer(registry=registry)
    graphs = transformer.transform(table)

    stats = graphs.stats
    print(f"  Procedures: {stats['procedures']}")
    print(f"  Contexts: {stats['contexts']}")
    print(f"  Context-sensitive edges: {stats['edges']}")
    print(f"  Context-insensitive edges: {stats['context_insensitive_edges']}")

    # 3. Query the context-sensitive graph
    cs_graph = registry.context_sensitive_call_graph
    print("\n--- Edges out of main ---")
    for edge in cs_graph.edges_out_of_context(main_ctx):
        print(f"  {edge}")

    print("\n--- Edges resuming in Log.write@any ---")
    for edge in cs_graph.edges_into_context(log_ctx):
        print(f"  {edge}")

    # 4. Query the context-insensitive graph
    print("\n--- Callers of Log.write (contexts forgotten) ---")
    for edge in registry.call_graph.edges_into("Log.write"):
        print(f"  {edge}")

    print("\n--- Procedures ---")
    for procedure in cs_graph.all_procedures():
        print(f"  {procedure}: {len(registry.call_graph.edges_out_of(procedure))} call edge(s)")


if __name__ == "__main__":
    main()
