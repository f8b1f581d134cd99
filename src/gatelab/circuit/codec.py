"""
Persistence Codec

Converts circuits, templates and libraries to and from plain JSON-ready
dictionaries. Field names follow the interchange format used by saved and
shared circuits (camelCase, composite kind spelled "CUSTOM"), and every
value round-trips exactly: decode(encode(x)) == x.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from .errors import CodecError
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
)


# =============================================================================
# Encoding
# =============================================================================

def encode_gate(gate: Gate) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": gate.id,
        "type": gate.kind.value,
        "position": {"x": gate.position.x, "y": gate.position.y},
        "value": gate.value,
    }
    if gate.name is not None:
        data["name"] = gate.name
    if gate.template is not None:
        data["customGateName"] = gate.template
    if gate.is_composite or gate.input_values:
        data["inputValues"] = list(gate.input_values)
    if gate.is_composite or gate.output_values:
        data["outputValues"] = list(gate.output_values)
    return data


def encode_endpoint(endpoint: Endpoint) -> Dict[str, Any]:
    return {"gateId": endpoint.gate_id, "portIndex": endpoint.port}


def encode_wire(wire: Wire) -> Dict[str, Any]:
    return {
        "id": wire.id,
        "from": encode_endpoint(wire.source),
        "to": encode_endpoint(wire.target),
    }


def encode_circuit(circuit: Circuit) -> Dict[str, Any]:
    return {
        "gates": [encode_gate(g) for g in circuit.gates],
        "wires": [encode_wire(w) for w in circuit.wires],
    }


def _encode_port(port: PortDecl) -> Dict[str, Any]:
    data: Dict[str, Any] = {"originalId": port.gate_id}
    if port.name is not None:
        data["name"] = port.name
    return data


def encode_template(template: CompositeTemplate) -> Dict[str, Any]:
    return {
        "name": template.name,
        "gates": [encode_gate(g) for g in template.gates],
        "wires": [encode_wire(w) for w in template.wires],
        "inputs": [_encode_port(p) for p in template.inputs],
        "outputs": [_encode_port(p) for p in template.outputs],
    }


def encode_library(library: LibraryStore) -> Dict[str, Any]:
    return {name: encode_template(library[name]) for name in library}


# =============================================================================
# Decoding
# =============================================================================

def _require(data: Dict[str, Any], key: str, what: str) -> Any:
    if not isinstance(data, dict):
        raise CodecError(f"{what}: expected an object, got {type(data).__name__}")
    if key not in data:
        raise CodecError(f"{what}: missing field '{key}'")
    return data[key]


def _bools(values: Any, what: str) -> tuple:
    if not isinstance(values, list) or not all(isinstance(v, bool) for v in values):
        raise CodecError(f"{what}: expected a list of booleans")
    return tuple(values)


def decode_gate(data: Dict[str, Any]) -> Gate:
    gate_id = _require(data, "id", "gate")
    what = f"gate '{gate_id}'"
    try:
        kind = GateKind(_require(data, "type", what))
    except ValueError:
        raise CodecError(f"{what}: unknown gate type {data['type']!r}") from None

    pos = data.get("position", {"x": 0, "y": 0})
    x, y = _require(pos, "x", what), _require(pos, "y", what)
    if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (x, y)):
        raise CodecError(f"{what}: position must be numeric")

    value = data.get("value", False)
    if not isinstance(value, bool):
        raise CodecError(f"{what}: value must be a boolean")

    return Gate(
        id=gate_id,
        kind=kind,
        position=Position(x, y),
        value=value,
        name=data.get("name"),
        template=data.get("customGateName"),
        input_values=_bools(data.get("inputValues", []), f"{what} inputValues"),
        output_values=_bools(data.get("outputValues", []), f"{what} outputValues"),
    )


def decode_endpoint(data: Dict[str, Any], what: str) -> Endpoint:
    gate_id = _require(data, "gateId", what)
    port = data.get("portIndex", 0)
    if not isinstance(port, int) or isinstance(port, bool) or port < 0:
        raise CodecError(f"{what}: portIndex must be a non-negative integer")
    return Endpoint(gate_id, port)


def decode_wire(data: Dict[str, Any]) -> Wire:
    source = decode_endpoint(_require(data, "from", "wire"), "wire source")
    target = decode_endpoint(_require(data, "to", "wire"), "wire target")
    # Template wires saved without an id get one derived from their ends
    if "id" in data:
        wire_id = data["id"]
        if not isinstance(wire_id, str):
            raise CodecError(f"wire: id must be a string, got {wire_id!r}")
    else:
        wire_id = f"{source.gate_id}:{source.port}->{target.gate_id}:{target.port}"
    return Wire(wire_id, source, target)


def decode_circuit(data: Dict[str, Any]) -> Circuit:
    gates = _require(data, "gates", "circuit")
    wires = data.get("wires", [])
    if not isinstance(gates, list) or not isinstance(wires, list):
        raise CodecError("circuit: 'gates' and 'wires' must be lists")
    return Circuit(
        gates=tuple(decode_gate(g) for g in gates),
        wires=tuple(decode_wire(w) for w in wires),
    )


def _decode_ports(items: Any, what: str) -> tuple:
    if not isinstance(items, list):
        raise CodecError(f"{what}: expected a list")
    return tuple(
        PortDecl(_require(p, "originalId", what), p.get("name")) for p in items
    )


def decode_template(data: Dict[str, Any]) -> CompositeTemplate:
    name = _require(data, "name", "template")
    what = f"template '{name}'"
    return CompositeTemplate(
        name=name,
        gates=tuple(decode_gate(g) for g in data.get("gates", [])),
        wires=tuple(decode_wire(w) for w in data.get("wires", [])),
        inputs=_decode_ports(data.get("inputs", []), f"{what} inputs"),
        outputs=_decode_ports(data.get("outputs", []), f"{what} outputs"),
    )


def decode_library(data: Dict[str, Any]) -> LibraryStore:
    if not isinstance(data, dict):
        raise CodecError("library: expected an object keyed by template name")
    templates: List[CompositeTemplate] = []
    for key, item in data.items():
        template = decode_template(item)
        if template.name != key:
            raise CodecError(f"library: entry '{key}' holds template '{template.name}'")
        templates.append(template)
    return LibraryStore(templates)


# =============================================================================
# Text and files
# =============================================================================

def dumps(circuit: Circuit, indent: int = 2) -> str:
    return json.dumps(encode_circuit(circuit), indent=indent)


def loads(text: str) -> Circuit:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CodecError(f"invalid JSON: {e}") from e
    return decode_circuit(data)


def save_circuit(circuit: Circuit, path: Path):
    """Save circuit to file"""
    with open(path, "w") as f:
        f.write(dumps(circuit))


def load_circuit(path: Path) -> Circuit:
    """Load circuit from file"""
    with open(path) as f:
        return loads(f.read())
