"""
SCM provenance - source-control attribution for test telemetry.

Detects the CI execution context from environment state and mines the local
git checkout for the branch, change-request contributors and change size.
"""

__version__ = "0.1.0"

from .assembler import AttributeAssembler, attributes_to_dict, collect_attributes, detect_scm
from .config import ProvenanceConfig, load_config
from .context import ExecutionContext, Provider, get_target_branch, resolve

__all__ = [
    "collect_attributes",  # Main entry point
    "AttributeAssembler",
    "attributes_to_dict",
    "detect_scm",
    "resolve",
    "get_target_branch",
    "ExecutionContext",
    "Provider",
    "ProvenanceConfig",
    "load_config",
]
