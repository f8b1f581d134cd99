"""
Fixpoint Engine

Relaxation over a flat gate/wire set. Every non-INPUT gate is re-evaluated
in the fixed gate order, reading the newest values of its drivers, including
ones updated earlier in the same pass (Gauss-Seidel). Passes repeat until
one changes nothing or the pass budget runs out.

Feedback loops need no special handling: a loop that oscillates simply
exhausts the budget and the last computed values are returned.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from ..circuit.model import Gate, GateKind, PRIMITIVE_PORTS, Wire
from ..circuit.primitives import evaluate_primitive
from ..circuit.topology import TopologyIndex


@dataclass(frozen=True)
class FixpointResult:
    """Outcome of one fixpoint run"""
    gates: Tuple[Gate, ...]
    passes: int
    converged: bool  # False when the budget ran out while values still changed


def gate_value(gate: Gate, index: TopologyIndex, gates: Sequence[Gate]) -> bool:
    """New primary value of a gate given the current state of its drivers"""
    if gate.kind is GateKind.COMPOSITE:
        # Composite signals live in the port arrays owned by the expander
        return False
    arity = PRIMITIVE_PORTS[gate.kind][0]
    inputs = [index.read(gates, gate.id, port) for port in range(arity)]
    return evaluate_primitive(gate.kind, inputs, arity, stimulus=gate.value)


def run_fixpoint(gates: Sequence[Gate],
                 wires: Sequence[Wire],
                 max_passes: int = 50,
                 index: Optional[TopologyIndex] = None) -> FixpointResult:
    """
    Relax a gate set to a stable state.

    Args:
        gates: Gates in sweep order
        wires: Wires between them
        max_passes: Pass budget
        index: Prebuilt topology index for this gate/wire set

    Returns:
        FixpointResult with fresh gate values; the inputs are not modified
    """
    state: List[Gate] = list(gates)
    if index is None:
        index = TopologyIndex(state, wires)

    passes = 0
    changed = True
    while changed and passes < max_passes:
        passes += 1
        changed = False
        for i, gate in enumerate(state):
            if gate.kind is GateKind.INPUT:
                continue
            value = gate_value(gate, index, state)
            if value != gate.value:
                state[i] = replace(gate, value=value)
                changed = True

    return FixpointResult(gates=tuple(state), passes=passes, converged=not changed)
