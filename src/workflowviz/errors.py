# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class WorkflowVizError(Exception):
    """
    Structured error with enough context for:
      - clean CLI output
      - HTTP error bodies
      - debugging without full tracebacks
    """
    kind: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class DslParseError(WorkflowVizError):
    """Raised when DSL text cannot be turned into workflow/pipeline sections."""
    kind: str = "DslParseError"
    message: str = "invalid DSL"
