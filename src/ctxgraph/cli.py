"""Command-line interface for ctxgraph."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from ctxgraph import __version__
from ctxgraph.config import (
    ProjectConfig,
    find_project_root,
    get_config_value,
    get_ctxgraph_dir,
    load_config,
    save_config,
    set_config_value,
)
from ctxgraph.exceptions import ConfigError, CtxGraphError
from ctxgraph.ui.console import Console

console = Console()

path_option = click.option("--path", "-p", default=None, help="Path to the project root.")


def _require_project(path: str | None) -> Path:
    """The project to manage: `path` if given, else the enclosing one."""
    root = Path(path).resolve() if path else find_project_root()
    if root is None:
        console.error("No ctxgraph project here. Run 'ctxgraph init' or pass --path.")
        sys.exit(1)
    if not root.is_dir():
        console.error(f"Not a directory: {root}")
        sys.exit(1)
    return root


def _project_config(path: str | None) -> ProjectConfig:
    """Configuration of the enclosing project, or the defaults."""
    root = Path(path).resolve() if path else find_project_root()
    if root is None:
        return ProjectConfig()
    try:
        return load_config(root)
    except CtxGraphError as e:
        console.error(str(e))
        sys.exit(1)


def _build(table_file: str, path: str | None):
    """Load a transition table and build both call graphs from it."""
    from ctxgraph.analysis.loader import load_transition_table
    from ctxgraph.graph.transformer import CallGraphTransformer

    config = _project_config(path)
    try:
        loaded = load_transition_table(table_file)
        graphs = CallGraphTransformer(config=config).transform(loaded.table)
    except CtxGraphError as e:
        console.error(str(e))
        sys.exit(1)
    return loaded, graphs


@click.group()
@click.version_option(version=__version__, prog_name="ctxgraph")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """ctxgraph - call graphs from context-sensitive analysis results."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@path_option
def init(path: str | None):
    """Create a .ctxgraph directory with the default configuration."""
    root = Path(path or ".").resolve()
    if not root.exists():
        console.error(f"Path does not exist: {root}")
        sys.exit(1)

    config = _project_config(str(root))
    config.name = root.name
    save_config(root, config)
    console.success(f"Configuration saved to {get_ctxgraph_dir(root)}")


@main.command()
@click.argument("table_file", type=click.Path(exists=True, dir_okay=False))
@path_option
def stats(table_file: str, path: str | None):
    """Build the call graphs for TABLE_FILE and show statistics."""
    _, graphs = _build(table_file, path)
    console.show_stats(graphs.stats)


@main.command()
@click.argument("table_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--context", "-c", "context_id", required=True, help="Context id.")
@click.option("--node", "-n", default=None, help="Restrict to one call node.")
@click.option("--into", is_flag=True, help="Show edges resuming in the context.")
@path_option
def edges(table_file: str, context_id: str, node: str | None, into: bool, path: str | None):
    """List context-sensitive edges out of (or into) a context."""
    loaded, graphs = _build(table_file, path)
    cs_graph = graphs.context_sensitive_call_graph

    context = loaded.contexts.get(context_id)
    if context is None:
        console.error(f"Unknown context: {context_id}")
        sys.exit(1)

    if into:
        result = cs_graph.edges_into_context(context)
        title = f"Edges into {context_id}"
    elif node is not None:
        instruction = loaded.instructions.get(node)
        if instruction is None:
            result = ()
        else:
            result = cs_graph.edges_out_of_call_site(context, instruction)
        title = f"Edges out of {context_id} at {node}"
    else:
        result = cs_graph.edges_out_of_context(context)
        title = f"Edges out of {context_id}"

    if not result:
        console.warning(f"No edges found for '{context_id}'")
        return
    console.info(f"Found {len(result)} edge(s)")
    console.show_cs_edges(result, title)


@main.command()
@click.argument("table_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("procedure")
@path_option
def callees(table_file: str, procedure: str, path: str | None):
    """List context-insensitive call edges out of PROCEDURE."""
    _, graphs = _build(table_file, path)
    result = graphs.call_graph.edges_out_of(procedure)
    if not result:
        console.warning(f"No callees found for '{procedure}'")
        return
    console.info(f"Found {len(result)} edge(s)")
    console.show_ci_edges(result, f"Calls from {procedure}")


@main.command()
@click.argument("table_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("procedure")
@path_option
def callers(table_file: str, procedure: str, path: str | None):
    """List context-insensitive call edges into PROCEDURE."""
    _, graphs = _build(table_file, path)
    result = graphs.call_graph.edges_into(procedure)
    if not result:
        console.warning(f"No callers found for '{procedure}'")
        return
    console.info(f"Found {len(result)} edge(s)")
    console.show_ci_edges(result, f"Calls into {procedure}")


# =========================================================================
# Config Management
# =========================================================================

@main.group("config")
def config_group():
    """Manage ctxgraph configuration."""


@config_group.command("show")
@path_option
def config_show(path: str | None):
    """Print the whole configuration as JSON."""
    config = _project_config(str(_require_project(path)))
    console.console.print_json(config.model_dump_json())


@config_group.command("get")
@click.argument("key")
@path_option
def config_get(key: str, path: str | None):
    """Print one setting, e.g. 'classifier.strict'."""
    config = _project_config(str(_require_project(path)))
    try:
        value = get_config_value(config, key)
    except KeyError:
        console.error(f"Unknown config key: {key}")
        sys.exit(1)
    console.console.print(f"{key} = {value}")


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@path_option
def config_set(key: str, value: str, path: str | None):
    """Change one setting. VALUE is read as JSON when it parses, else as text."""
    root = _require_project(path)
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    try:
        config = set_config_value(_project_config(str(root)), key, parsed)
    except KeyError:
        console.error(f"Unknown config key: {key}")
        sys.exit(1)
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)
    save_config(root, config)
    console.success(f"Set {key} = {parsed}")


if __name__ == "__main__":
    main()
