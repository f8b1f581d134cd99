"""
Primitive Evaluator

Pure boolean functions for the built-in gate kinds.

Inputs are given as one slot per declared input port, with None marking an
unconnected port. An AND or OR gate with any unconnected port is inactive
(false) whatever its connected inputs say. NOT reads an unconnected input
as false, so an unconnected NOT outputs true.
"""

from typing import Optional, Sequence

from .model import GateKind


def evaluate_primitive(kind: GateKind,
                       inputs: Sequence[Optional[bool]],
                       arity: int,
                       stimulus: bool = False) -> bool:
    """
    Output of a primitive gate.

    Args:
        kind: Gate kind (must be primitive)
        inputs: Value per input slot, None when unconnected
        arity: Number of declared input ports
        stimulus: Stored value of an INPUT gate

    Returns:
        The gate's output signal
    """
    if kind is GateKind.INPUT:
        return stimulus

    slots = [inputs[i] if i < len(inputs) else None for i in range(arity)]

    if kind is GateKind.OUTPUT:
        return bool(slots[0]) if slots else False

    if kind is GateKind.NOT:
        return not slots[0] if slots else True

    # Under-connection: incomplete wiring always yields an inactive signal
    if any(v is None for v in slots):
        return False

    if kind is GateKind.AND:
        return all(slots)
    if kind is GateKind.OR:
        return any(slots)

    raise ValueError(f"Not a primitive gate kind: {kind}")
