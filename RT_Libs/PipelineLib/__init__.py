"""
PipelineLib - Operator registry and edit chains
"""

from RT_Libs.PipelineLib.operator_registry import (
    OperatorRegistry,
    get_default_registry,
    register_default_operators,
)
from RT_Libs.PipelineLib.edit_chain import (
    EditChainError,
    EditStep,
    get_chain_summary,
    run_edit_chain,
    submit_edit_chain,
    validate_chain,
)

__all__ = [
    "OperatorRegistry",
    "get_default_registry",
    "register_default_operators",
    "EditChainError",
    "EditStep",
    "get_chain_summary",
    "run_edit_chain",
    "submit_edit_chain",
    "validate_chain",
]
