"""
gatelab analysis

Truth tables (numpy) and symbolic equivalence checks (Z3) for templates.
"""

from .truth_table import TruthTable, truth_table
from .verify import (
    counterexample,
    symbolic_outputs,
    templates_equivalent,
    topological_order,
    verify_truth_table,
)

__all__ = [
    "TruthTable",
    "truth_table",
    "symbolic_outputs",
    "verify_truth_table",
    "templates_equivalent",
    "counterexample",
    "topological_order",
]
