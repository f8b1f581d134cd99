"""
gatelab - Deterministic Logic Circuit Evaluation

Computes steady-state boolean values for circuits of primitive gates and
user-defined composite components connected by single-bit wires.

Features:
- Bounded relaxation: feedback loops always terminate with a usable result
- Composite templates expanded recursively, with a nesting depth guard
- Pure evaluation: circuits and libraries are immutable values
- Exact JSON round-trip for circuits and template libraries
- Truth tables and Z3 equivalence checks for templates

Quick Start:
    from gatelab import Circuit, GateKind, Endpoint, LibraryStore, evaluate
    from gatelab.circuit import edits

    c = Circuit()
    c = edits.add_gate(c, GateKind.INPUT, gate_id="a")
    c = edits.add_gate(c, GateKind.NOT, gate_id="n")
    c = edits.add_gate(c, GateKind.OUTPUT, gate_id="y")
    c = edits.connect(c, Endpoint("a"), Endpoint("n"))
    c = edits.connect(c, Endpoint("n"), Endpoint("y"))

    settled = evaluate(c, LibraryStore())
    settled.gate("y").value  # True

Composite Components:
    library = edits.promote_selection(c, ["a", "n", "y"], "inv", LibraryStore())
    c2 = edits.instantiate(Circuit(), library, "INV", gate_id="u1")
"""

__version__ = "0.1.0"

# =============================================================================
# MODEL: Circuits, templates, library
# =============================================================================

from .circuit import (
    Circuit,
    CompositeTemplate,
    Endpoint,
    Gate,
    GateKind,
    LibraryStore,
    PortDecl,
    Position,
    Wire,
)

# =============================================================================
# ERRORS
# =============================================================================

from .circuit import (
    CodecError,
    GateLabError,
    StructuralError,
    TemplateError,
    VerificationError,
)

# =============================================================================
# ENGINE: Evaluation entry points
# =============================================================================

from .engine import (
    EngineConfig,
    EvaluationReport,
    EvaluationResult,
    evaluate,
    evaluate_with_report,
    simulate_template,
)

__all__ = [
    # Version
    "__version__",

    # Model
    "Circuit",
    "CompositeTemplate",
    "Endpoint",
    "Gate",
    "GateKind",
    "LibraryStore",
    "PortDecl",
    "Position",
    "Wire",

    # Errors
    "GateLabError",
    "StructuralError",
    "TemplateError",
    "CodecError",
    "VerificationError",

    # Engine
    "EngineConfig",
    "EvaluationReport",
    "EvaluationResult",
    "evaluate",
    "evaluate_with_report",
    "simulate_template",
]
