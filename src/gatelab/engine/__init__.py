"""
gatelab engine

Pipeline:
    Circuit + Library -> (Expander sweep <-> Fixpoint run)* -> Circuit

Usage:
    from gatelab.engine import evaluate, EngineConfig

    settled = evaluate(circuit, library, EngineConfig(max_passes=100))
"""

from .config import DEFAULT_CONFIG, EngineConfig
from .fixpoint import FixpointResult, run_fixpoint
from .expander import CompositeExpander
from .evaluator import (
    EvaluationReport,
    EvaluationResult,
    Evaluator,
    evaluate,
    evaluate_with_report,
    simulate_template,
)

__all__ = [
    "EngineConfig",
    "DEFAULT_CONFIG",
    "FixpointResult",
    "run_fixpoint",
    "CompositeExpander",
    "Evaluator",
    "EvaluationReport",
    "EvaluationResult",
    "evaluate",
    "evaluate_with_report",
    "simulate_template",
]
