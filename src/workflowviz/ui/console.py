"""Console output formatting utilities for workflowviz."""

from __future__ import annotations

import json
import sys
from typing import Any, Optional

from workflowviz.model import CompiledGraph, NodeType


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_json(self, data: Any) -> None:
        """Print a JSON document to stdout."""
        print(json.dumps(data, indent=2, sort_keys=False))

    def print_graph_summary(self, graph: CompiledGraph, source: str) -> None:
        """Print a short summary of a compiled graph to stderr."""
        joins = sum(1 for n in graph.nodes if n.type == NodeType.FLOW_NODE)
        triggers = [n.id for n in graph.nodes if n.type in (NodeType.CRON, NodeType.WEBHOOK)]
        self.print_info(f"\nGRAPH COMPILED: {source}")
        self.print_info(f"Kind: {graph.dsl_kind.value}")
        self.print_info(f"Nodes: {len(graph.nodes)} (join nodes: {joins})")
        self.print_info(f"Edges: {len(graph.edges)}")
        if triggers:
            self.print_info(f"Trigger: {', '.join(triggers)}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message, file=sys.stderr)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
