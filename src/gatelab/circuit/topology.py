"""
Topology Index

Per-pass lookup tables derived from a gate/wire set: which endpoint drives
each input port and where each gate sits in the sweep order. Built in
linear time and read-only once built; rebuild whenever the gate or wire set
changes.
"""

from typing import Dict, Iterable, Optional, Sequence, Tuple

from .model import Endpoint, Gate, Wire


class TopologyIndex:
    """
    Adjacency index for one gate/wire set.

    If two wires target the same input port (a fan-in violation the edit
    layer should have rejected) the one appearing later in the wire
    sequence wins, i.e. the most recently added wire.
    """

    def __init__(self, gates: Sequence[Gate], wires: Iterable[Wire]):
        self._positions: Dict[str, int] = {}
        for i, gate in enumerate(gates):
            self._positions.setdefault(gate.id, i)

        self._drivers: Dict[Tuple[str, int], Endpoint] = {}
        for wire in wires:
            target = wire.target
            if target.gate_id not in self._positions:
                continue
            self._drivers[(target.gate_id, target.port)] = wire.source

    def __contains__(self, gate_id: str) -> bool:
        return gate_id in self._positions

    def position(self, gate_id: str) -> Optional[int]:
        """Index of the gate in the sweep order"""
        return self._positions.get(gate_id)

    def driver(self, gate_id: str, port: int) -> Optional[Endpoint]:
        """Source endpoint wired into (gate_id, port), if any"""
        return self._drivers.get((gate_id, port))

    def read(self, gates: Sequence[Gate], gate_id: str, port: int) -> Optional[bool]:
        """
        Current value on an input port, or None when nothing is wired.

        A wire from a gate that no longer exists reads as false.
        """
        source = self._drivers.get((gate_id, port))
        if source is None:
            return None
        i = self._positions.get(source.gate_id)
        if i is None:
            return False
        return gates[i].output(source.port)
