"""
Edit Operations

Pure functions that produce a new Circuit or LibraryStore from an old one.
This is where structural rules are enforced: the engine trusts that every
input port has at most one driver and that wires only name existing gates.
"""

import uuid
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import StructuralError, TemplateError
from .library import LibraryStore
from .model import (
    Circuit,
    CompositeTemplate,
    Endpoint,
    Gate,
    GateKind,
    PortDecl,
    Position,
    Wire,
    port_counts,
)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# =============================================================================
# Gates
# =============================================================================

def add_gate(circuit: Circuit, kind: GateKind,
             position: Position = Position(),
             gate_id: Optional[str] = None,
             name: Optional[str] = None) -> Circuit:
    """Append a primitive gate. Composite gates go through instantiate()."""
    if not kind.is_primitive:
        raise StructuralError("composite gates are added with instantiate()")
    gate_id = gate_id or _new_id(kind.value)
    if circuit.has_gate(gate_id):
        raise StructuralError(f"duplicate gate id '{gate_id}'")
    gate = Gate(gate_id, kind, position, name=name)
    return circuit.with_gates([*circuit.gates, gate])


def remove_gates(circuit: Circuit, gate_ids: Iterable[str]) -> Circuit:
    """Delete gates together with every wire touching them"""
    doomed = set(gate_ids)
    return Circuit(
        gates=tuple(g for g in circuit.gates if g.id not in doomed),
        wires=tuple(
            w for w in circuit.wires
            if w.source.gate_id not in doomed and w.target.gate_id not in doomed
        ),
    )


def move_gates(circuit: Circuit, gate_ids: Iterable[str],
               dx: float, dy: float) -> Circuit:
    moving = set(gate_ids)
    return circuit.with_gates(
        replace(g, position=g.position.moved(dx, dy)) if g.id in moving else g
        for g in circuit.gates
    )


def set_input(circuit: Circuit, gate_id: str, value: bool) -> Circuit:
    """Set the stimulus of an INPUT gate. Other gate kinds are left alone."""
    return circuit.with_gates(
        replace(g, value=bool(value))
        if g.id == gate_id and g.kind is GateKind.INPUT else g
        for g in circuit.gates
    )


def toggle_input(circuit: Circuit, gate_id: str) -> Circuit:
    return circuit.with_gates(
        replace(g, value=not g.value)
        if g.id == gate_id and g.kind is GateKind.INPUT else g
        for g in circuit.gates
    )


# =============================================================================
# Wires
# =============================================================================

def connect(circuit: Circuit, source: Endpoint, target: Endpoint,
            wire_id: Optional[str] = None,
            library: Optional[LibraryStore] = None) -> Circuit:
    """
    Add a wire from an output port to an input port.

    Raises:
        StructuralError: unknown gate, port out of range, or the target
            port already has a driver
    """
    try:
        src_gate = circuit.gate(source.gate_id)
        dst_gate = circuit.gate(target.gate_id)
    except KeyError as e:
        raise StructuralError(f"unknown gate id {e.args[0]!r}") from None

    library = library or LibraryStore()
    _, src_outputs = port_counts(src_gate, library.get(src_gate.template or ""))
    dst_inputs, _ = port_counts(dst_gate, library.get(dst_gate.template or ""))
    if not 0 <= source.port < src_outputs:
        raise StructuralError(
            f"gate '{src_gate.id}' has no output port {source.port}")
    if not 0 <= target.port < dst_inputs:
        raise StructuralError(
            f"gate '{dst_gate.id}' has no input port {target.port}")

    existing = circuit.wire_into(target.gate_id, target.port)
    if existing is not None:
        raise StructuralError(
            f"input port {target.port} of '{target.gate_id}' is already "
            f"driven by wire '{existing.id}'")

    wire_id = wire_id or _new_id("wire")
    if any(w.id == wire_id for w in circuit.wires):
        raise StructuralError(f"duplicate wire id '{wire_id}'")
    return circuit.with_wires([*circuit.wires, Wire(wire_id, source, target)])


def disconnect(circuit: Circuit, wire_id: str) -> Circuit:
    return circuit.with_wires(w for w in circuit.wires if w.id != wire_id)


def disconnect_port(circuit: Circuit, gate_id: str,
                    port: int) -> Tuple[Circuit, Optional[Wire]]:
    """
    Detach the wire driving an input port.

    Returns the new circuit and the removed wire (None if the port was
    free), so a caller can re-attach its source somewhere else.
    """
    wire = circuit.wire_into(gate_id, port)
    if wire is None:
        return circuit, None
    return disconnect(circuit, wire.id), wire


def validate(circuit: Circuit) -> List[str]:
    """List structural problems; an empty list means the circuit is sound"""
    errors = []
    ids = [g.id for g in circuit.gates]
    if len(ids) != len(set(ids)):
        errors.append("Duplicate gate ids")
    known = set(ids)

    seen = {}
    for w in circuit.wires:
        for end, label in ((w.source, "source"), (w.target, "target")):
            if end.gate_id not in known:
                errors.append(f"Wire {w.id}: unknown {label} gate '{end.gate_id}'")
        key = (w.target.gate_id, w.target.port)
        if key in seen:
            errors.append(
                f"Wire {w.id}: input port {w.target.port} of '{w.target.gate_id}' "
                f"already driven by wire {seen[key]}")
        else:
            seen[key] = w.id

    for g in circuit.gates:
        if g.is_composite and not g.template:
            errors.append(f"Gate {g.id}: composite gate without a template name")
    return errors


# =============================================================================
# Templates
# =============================================================================

def promote_selection(circuit: Circuit, gate_ids: Sequence[str], name: str,
                      library: LibraryStore) -> LibraryStore:
    """
    Save a selection of gates as a composite template.

    The selected INPUT and OUTPUT gates become the template's ports, ordered
    top to bottom by their vertical position. Only wires with both ends
    inside the selection are kept. Positions are made relative to the
    selection's top-left corner and runtime values are dropped.

    Raises:
        TemplateError: empty name or selection, or no INPUT/OUTPUT gate
    """
    name = name.strip().upper()
    chosen = set(gate_ids)
    selection = [g for g in circuit.gates if g.id in chosen]
    if not name or not selection:
        raise TemplateError("a template needs a name and at least one gate")

    inputs = sorted((g for g in selection if g.kind is GateKind.INPUT),
                    key=lambda g: g.position.y)
    outputs = sorted((g for g in selection if g.kind is GateKind.OUTPUT),
                     key=lambda g: g.position.y)
    if not inputs or not outputs:
        raise TemplateError(
            "a template needs at least one INPUT and one OUTPUT gate")

    inner = [g for g in selection if g.kind not in (GateKind.INPUT, GateKind.OUTPUT)]
    io = [g for g in selection if g.kind in (GateKind.INPUT, GateKind.OUTPUT)]

    min_x = min(g.position.x for g in selection)
    min_y = min(g.position.y for g in selection)
    gates = tuple(
        replace(g.shape(), position=g.position.moved(-min_x, -min_y))
        for g in inner + io
    )
    wires = tuple(
        w for w in circuit.wires
        if w.source.gate_id in chosen and w.target.gate_id in chosen
    )

    template = CompositeTemplate(
        name=name,
        gates=gates,
        wires=wires,
        inputs=tuple(PortDecl(g.id, g.name) for g in inputs),
        outputs=tuple(PortDecl(g.id, g.name) for g in outputs),
    )
    return library.with_template(template)


def instantiate(circuit: Circuit, library: LibraryStore, name: str,
                position: Position = Position(),
                gate_id: Optional[str] = None) -> Circuit:
    """Add a composite gate using the named template"""
    template = library.get(name)
    if template is None:
        raise TemplateError(f"unknown template '{name}'")
    gate_id = gate_id or _new_id(name)
    if circuit.has_gate(gate_id):
        raise StructuralError(f"duplicate gate id '{gate_id}'")
    gate = Gate(
        id=gate_id,
        kind=GateKind.COMPOSITE,
        position=position,
        name=name,
        template=name,
        input_values=(False,) * template.num_inputs,
        output_values=(False,) * template.num_outputs,
    )
    return circuit.with_gates([*circuit.gates, gate])


def delete_template(library: LibraryStore, name: str) -> LibraryStore:
    """
    Remove a template. Instances already placed in circuits keep their
    reference and are handled by the engine's missing-template policy.
    """
    return library.without(name)
