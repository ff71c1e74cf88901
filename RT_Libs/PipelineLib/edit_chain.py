"""
Edit chains: ordered operator steps applied to one raster.

The caller selects a chain of (operator name, parameters) steps; each step's
output is the next step's input. Chains are validated against the registry
before anything runs, and can be pushed onto a ``concurrent.futures``
executor so the interactive thread never blocks. When several chains are in
flight for the same image, the caller keeps the most recent result.
"""

import concurrent.futures
from dataclasses import dataclass
import logging
from typing import Any, List, Optional, Sequence, Tuple

from RT_Libs.ImageEditingLib.image_models import RasterImage
from RT_Libs.PipelineLib.operator_registry import OperatorRegistry, get_default_registry

logger = logging.getLogger(__name__)


class EditChainError(RuntimeError):
    """An operator failed while running a chain."""

    def __init__(self, step_index: int, operator: str, message: str):
        super().__init__(f"Error executing step {step_index} ({operator}): {message}")
        self.step_index = step_index
        self.operator = operator


@dataclass(frozen=True)
class EditStep:
    """One operator application.

    Attributes:
        operator: Registered operator name (e.g., "Filter")
        params: Parameters of the operator's registered type
    """
    operator: str
    params: Any


def validate_chain(
    steps: Sequence[EditStep],
    registry: Optional[OperatorRegistry] = None,
) -> Tuple[bool, List[str]]:
    """
    Check that every step names a registered operator with fitting params.

    Returns:
        Tuple of (is_valid: bool, errors: List[str])
    """
    registry = registry or get_default_registry()
    errors: List[str] = []

    for idx, step in enumerate(steps):
        if not registry.has_operator(step.operator):
            errors.append(f"Step {idx}: unknown operator '{step.operator}'")
            continue
        param_type = registry.get_metadata(step.operator)["param_type"]
        if param_type is not None and not isinstance(step.params, param_type):
            errors.append(
                f"Step {idx}: '{step.operator}' got params of type {type(step.params).__name__}"
            )

    return len(errors) == 0, errors


def run_edit_chain(
    image: RasterImage,
    steps: Sequence[EditStep],
    registry: Optional[OperatorRegistry] = None,
) -> RasterImage:
    """
    Apply steps in order, feeding each output into the next step.

    Args:
        image: Source RasterImage
        steps: Steps to apply; an empty chain returns ``image``
        registry: Operator registry (the default registry when None)

    Returns:
        Final RasterImage

    Raises:
        KeyError: If a step names an unregistered operator
        TypeError: If a step's params do not match its operator
        EditChainError: If an operator raises while running
    """
    registry = registry or get_default_registry()

    is_valid, errors = validate_chain(steps, registry)
    if not is_valid:
        if any("unknown operator" in error for error in errors):
            raise KeyError("; ".join(errors))
        raise TypeError("; ".join(errors))

    result = image
    for idx, step in enumerate(steps):
        try:
            result = registry.execute(step.operator, result, step.params)
        except Exception as e:
            raise EditChainError(idx, step.operator, str(e)) from e
        logger.debug(f"Step {idx} ({step.operator}) done")

    return result


def submit_edit_chain(
    executor: concurrent.futures.Executor,
    image: RasterImage,
    steps: Sequence[EditStep],
    registry: Optional[OperatorRegistry] = None,
) -> concurrent.futures.Future:
    """
    Run a chain on an executor.

    Returns:
        Future resolving to the final RasterImage
    """
    return executor.submit(run_edit_chain, image, tuple(steps), registry)


def get_chain_summary(steps: Sequence[EditStep]) -> str:
    """
    Generate a human-readable summary of a chain.

    Example:
        >>> print(get_chain_summary([EditStep("Filter", FilterDescriptor(FilterKind.SEPIA))]))
        Edit Chain: 1 step
          0. Filter
    """
    lines = [f"Edit Chain: {len(steps)} step{'s' if len(steps) != 1 else ''}"]
    for idx, step in enumerate(steps):
        lines.append(f"  {idx}. {step.operator}")
    return "\n".join(lines)
