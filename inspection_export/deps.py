"""
Shared state and dependency getters for the API routers.

`export_tool` is mutable (swapped in tests and on shutdown), so routes
reach it through get_export_tool().
"""

import logging
import time
from typing import Optional

from .services import ExportTool, create_export_tool


logger = logging.getLogger(__name__)

start_time = time.time()

_export_tool: Optional[ExportTool] = None


def get_export_tool() -> ExportTool:
    global _export_tool
    if _export_tool is None:
        _export_tool = create_export_tool()
        logger.info("Export tool initialized")
    return _export_tool


def set_export_tool(tool: Optional[ExportTool]):
    global _export_tool
    _export_tool = tool
