# cli.py
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click

from workflowviz import settings
from workflowviz.compiler import compile_dsl
from workflowviz.dsl import load_dsl
from workflowviz.errors import DslParseError
from workflowviz.layout import layout_for_graph, select_layout
from workflowviz.model import DslKind, GraphDirection, NodeDef, TriggerType
from workflowviz.ui.console import Console, set_console, get_console

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def find_dsl_files() -> list[Path]:
    """
    Find all DSL files in the current directory.

    Returns:
        List of Path objects for *_workflow.yml / *_workflow.yaml files
    """
    current_dir = Path(".")
    found = set(current_dir.glob("*_workflow.yml")) | set(current_dir.glob("*_workflow.yaml"))
    return sorted(found)


def discover_dsl(dsl_arg: str | None) -> Path:
    """
    Discover the DSL file from argument or default.

    Raises:
        SystemExit: If no file can be found or several candidates exist
    """
    console = get_console()

    if dsl_arg:
        dsl_path = Path(dsl_arg)
        if not dsl_path.exists():
            console.print_error(
                "DSL file not found",
                f"Could not find DSL file: {dsl_arg}",
                suggestion="Specify an existing file:\n  workflowviz compile my_workflow.yml --trigger MANUAL",
            )
            sys.exit(1)
        return dsl_path

    dsl_files = find_dsl_files()

    if len(dsl_files) == 0:
        console.print_error(
            "No DSL file found",
            "Could not find any DSL files.",
            details=[
                "Looked for:",
                "  *_workflow.yml",
                "  *_workflow.yaml",
            ],
            suggestion="Specify a DSL file explicitly:\n  workflowviz compile my_workflow.yml --trigger MANUAL",
        )
        sys.exit(1)

    if len(dsl_files) > 1:
        file_list = "\n".join(f"  {f}" for f in dsl_files)
        console.print_error(
            "Multiple DSL files found",
            "Found multiple DSL files. Please specify which one to use:",
            details=[file_list],
        )
        sys.exit(1)

    return dsl_files[0]


def load_catalog(path: str | None) -> Optional[List[NodeDef]]:
    """Read a task catalog: a JSON list of {type, webhook?, icon}."""
    if not path:
        return None
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"Task catalog must be a JSON list, got {type(raw).__name__}")
    return [NodeDef.from_dict(item) for item in raw]


def _choice(enum_cls) -> click.Choice:
    return click.Choice([e.value for e in enum_cls], case_sensitive=False)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """workflowviz: compile workflow/pipeline DSL into renderable graphs."""
    console = Console(debug=debug)
    set_console(console)
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command("compile")
@click.argument("dsl_file", required=False)
@click.option("--trigger", "trigger", type=_choice(TriggerType), required=True, help="Trigger type of the project")
@click.option("--catalog", default=None, help="Task catalog JSON used to resolve node icons")
@click.option(
    "--direction",
    type=_choice(GraphDirection),
    default=settings.DEFAULT_DIRECTION,
    show_default=True,
    help="Graph direction",
)
@click.option("--layout/--no-layout", default=True, show_default=True, help="Include the layout configuration")
@click.option("--summary/--no-summary", default=False, help="Print a graph summary to stderr")
def compile_cmd(dsl_file, trigger, catalog, direction, layout, summary):
    """Compile a DSL file into graph JSON."""
    console = get_console()

    dsl_path = discover_dsl(dsl_file)
    console.print_debug(f"Using DSL file: {dsl_path}")

    try:
        text = load_dsl(dsl_path)
        nodes_catalog = load_catalog(catalog)
        graph = compile_dsl(text, TriggerType(trigger.upper()), nodes_catalog)
    except DslParseError as e:
        console.print_error(
            "Invalid DSL",
            f"Could not parse {dsl_path}: {e.message}",
            details=[f"{k}: {v}" for k, v in e.details.items()],
        )
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    if summary:
        console.print_graph_summary(graph, dsl_path.name)

    out = graph.to_dict()
    if layout:
        out["layout"] = layout_for_graph(graph, GraphDirection(direction.upper())).to_dict()
    console.print_json(out)


@cli.command("layout")
@click.option("--kind", type=_choice(DslKind), required=True, help="DSL kind")
@click.option("--nodes", "node_count", type=click.IntRange(min=0), required=True, help="Number of nodes")
@click.option(
    "--direction",
    type=_choice(GraphDirection),
    default=settings.DEFAULT_DIRECTION,
    show_default=True,
    help="Graph direction",
)
def layout_cmd(kind, node_count, direction):
    """Print the layout configuration chosen for a graph shape."""
    config = select_layout(DslKind(kind.upper()), node_count, GraphDirection(direction.upper()))
    get_console().print_json(config.to_dict())


if __name__ == "__main__":
    cli()
