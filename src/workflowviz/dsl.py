# src/workflowviz/dsl.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .errors import DslParseError
from .model import ParsedDsl, TaskSpec, TriggerSpec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Section helpers
# ---------------------------------------------------------------------

def _optional_str(value: Any, *, field_name: str, ref: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    raise DslParseError(
        message=f"task {ref!r}: '{field_name}' must be a string",
        details={"ref": ref, "field": field_name, "value": value},
    )


def _needs_of(raw: Any, ref: str) -> Tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, list) and all(isinstance(n, str) for n in raw):
        return tuple(raw)
    raise DslParseError(
        message=f"task {ref!r}: 'needs' must be a list of task refs",
        details={"ref": ref, "needs": raw},
    )


def _task(raw: Any, ref: Any, section: str) -> TaskSpec:
    if not isinstance(raw, dict):
        raise DslParseError(
            message=f"{section}: every task must be a mapping",
            details={"section": section, "task": raw},
        )

    if ref is None or ref == "":
        raise DslParseError(
            message=f"{section}: task without a 'ref'",
            details={"section": section, "task": raw},
        )
    if isinstance(ref, (int, float)) and not isinstance(ref, bool):
        ref = str(ref)
    if not isinstance(ref, str):
        raise DslParseError(
            message=f"{section}: 'ref' must be a string",
            details={"section": section, "ref": ref},
        )

    task = raw.get("task")
    if not isinstance(task, str) or not task:
        raise DslParseError(
            message=f"task {ref!r}: 'task' must be a non-empty string",
            details={"section": section, "ref": ref, "task": task},
        )

    return TaskSpec(
        ref=ref,
        task=task,
        name=_optional_str(raw.get("name"), field_name="name", ref=ref),
        image=_optional_str(raw.get("image"), field_name="image", ref=ref),
        needs=_needs_of(raw.get("needs"), ref),
    )


def _tasks(raw: Any, section: str) -> Tuple[TaskSpec, ...]:
    """
    Accepts both section shapes:
      - a list of task mappings, each carrying `ref`
      - a mapping of ref -> task mapping
    Declaration order is preserved either way.
    """
    if raw is None:
        return ()

    tasks: List[TaskSpec] = []
    if isinstance(raw, list):
        for item in raw:
            ref = item.get("ref") if isinstance(item, dict) else None
            tasks.append(_task(item, ref, section))
    elif isinstance(raw, dict):
        for ref, item in raw.items():
            if isinstance(item, dict) and "ref" in item:
                ref = item["ref"]
            tasks.append(_task(item, ref, section))
    else:
        raise DslParseError(
            message=f"'{section}' must be a list or a mapping of tasks",
            details={"section": section, "type": type(raw).__name__},
        )

    return tuple(tasks)


def _trigger(raw: Any) -> Optional[TriggerSpec]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise DslParseError(
            message="'trigger' must be a mapping",
            details={"type": type(raw).__name__},
        )

    schedule = raw.get("schedule")
    webhook = raw.get("webhook")
    return TriggerSpec(
        schedule=str(schedule) if schedule is not None else None,
        webhook=str(webhook) if webhook is not None else None,
    )


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def parse(text: str) -> ParsedDsl:
    """
    Parse DSL text into its trigger / workflow / pipeline sections.

    No graph semantics here: refs in `needs` are not checked.

    Raises:
      DslParseError on malformed YAML or malformed sections.
    """
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        details: Dict[str, Any] = {"error": str(e).split("\n")[0]}
        if mark is not None:
            details["line"] = mark.line + 1
            details["column"] = mark.column + 1
        raise DslParseError(message="malformed YAML", details=details) from e

    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise DslParseError(
            message="DSL document must be a mapping",
            details={"type": type(doc).__name__},
        )

    workflow = doc.get("workflow")
    pipeline = doc.get("pipeline")
    if workflow is not None and pipeline is not None:
        logger.warning("DSL defines both 'workflow' and 'pipeline'; 'workflow' wins")

    parsed = ParsedDsl(
        trigger=_trigger(doc.get("trigger")),
        workflow=_tasks(workflow, "workflow") if workflow is not None else None,
        pipeline=_tasks(pipeline, "pipeline") if pipeline is not None else None,
    )
    logger.debug(
        "parsed DSL: workflow=%s pipeline=%s trigger=%s",
        len(parsed.workflow) if parsed.workflow is not None else None,
        len(parsed.pipeline) if parsed.pipeline is not None else None,
        parsed.trigger,
    )
    return parsed


def load_dsl(path: str | Path) -> str:
    """Read DSL text from a .yml/.yaml file."""
    dsl_path = Path(path).expanduser().resolve()
    if not dsl_path.exists():
        raise FileNotFoundError(f"DSL file not found: {dsl_path}")
    if dsl_path.suffix not in (".yml", ".yaml"):
        raise ValueError(f"DSL must be a .yml/.yaml file, got: {dsl_path.name}")
    return dsl_path.read_text(encoding="utf-8")
