"""
gatelab circuit layer

Value types, topology lookup, primitive gates, the template library and
the edit/persistence operations around them.
"""

from .errors import (
    CodecError,
    GateLabError,
    StructuralError,
    TemplateError,
    VerificationError,
)
from .model import (
    PRIMITIVE_PORTS,
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
from .topology import TopologyIndex
from .primitives import evaluate_primitive
from .library import LibraryStore
from .codec import (
    decode_circuit,
    decode_library,
    decode_template,
    dumps,
    encode_circuit,
    encode_library,
    encode_template,
    load_circuit,
    loads,
    save_circuit,
)
from . import edits

__all__ = [
    "GateLabError",
    "StructuralError",
    "TemplateError",
    "CodecError",
    "VerificationError",
    "PRIMITIVE_PORTS",
    "Circuit",
    "CompositeTemplate",
    "Endpoint",
    "Gate",
    "GateKind",
    "PortDecl",
    "Position",
    "Wire",
    "port_counts",
    "TopologyIndex",
    "evaluate_primitive",
    "LibraryStore",
    "encode_circuit",
    "decode_circuit",
    "encode_template",
    "decode_template",
    "encode_library",
    "decode_library",
    "dumps",
    "loads",
    "save_circuit",
    "load_circuit",
    "edits",
]
