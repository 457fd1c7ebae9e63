from __future__ import annotations
import os

LOG_LEVEL = os.environ.get("WORKFLOWVIZ_LOG_LEVEL", "WARNING")

# Viewer zoom floor in percent; content is never shrunk below MIN_ZOOM.
MIN_ZOOM = int(os.environ.get("WORKFLOWVIZ_MIN_ZOOM", "20"))

SHELL_ICON = os.environ.get("WORKFLOWVIZ_SHELL_ICON", "/icons/shell.svg")
DEFAULT_DIRECTION = os.environ.get("WORKFLOWVIZ_DIRECTION", "HORIZONTAL").upper()
