"""
Error types for the circuit layer.

Evaluation never raises these. They belong to the edit, library and
persistence layers, which must reject malformed circuits before they
reach the engine, and to the analysis tools.
"""


class GateLabError(Exception):
    """Base class for all gatelab errors"""


class StructuralError(GateLabError):
    """Duplicate wire destination, dangling gate id or bad port index"""


class TemplateError(GateLabError):
    """A composite template could not be created or resolved"""


class CodecError(GateLabError):
    """A serialized circuit or library document is malformed"""


class VerificationError(GateLabError):
    """The solver could not decide a verification query"""
