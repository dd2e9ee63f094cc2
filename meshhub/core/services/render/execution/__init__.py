"""
L4 Execution — ``__init__.py`` re-exports step rendering and post-processing.
"""

from meshhub.core.services.render.execution.postprocess import (  # noqa: F401
    filter_required_labels,
    postprocess,
    rewrite_namespaces,
)
from meshhub.core.services.render.execution.steps import (  # noqa: F401
    IMPLICIT_STEP_NAME,
    PlannedStep,
    RenderState,
    StepOrchestrator,
    StepOutput,
    plan_steps,
)
