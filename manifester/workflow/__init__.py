"""
Workflow module for the Odyssey manifester.

This module provides functionality for:
- Reading the run configuration from the environment
- Orchestrating lookups, cache persistence and manifest generation
- Handing the outputs to elm-format and topojson when they are installed

Main classes:
- ManifestOrchestrator: Runs the complete workflow
- WorkflowConfig: Validated run settings
- RunReport: Outcome of a run
"""

from .workflow_config import WorkflowConfig
from .workflow_orchestrator import ManifestOrchestrator, RunReport
from .workflow_tools import build_world_topology, format_elm, run_external

__all__ = [
    # Main classes
    "ManifestOrchestrator",
    "WorkflowConfig",
    "RunReport",

    # Functions
    "run_external",
    "format_elm",
    "build_world_topology",
]
