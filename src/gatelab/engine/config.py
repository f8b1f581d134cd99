"""
Engine configuration.

Iteration caps are the only termination guarantee for feedback circuits,
so they live in one place and can be loaded from YAML next to the rest of
an application's settings.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

import yaml


MISSING_TEMPLATE_POLICIES = ("zero", "freeze")

# Each nesting level costs a handful of Python frames
MAX_DEPTH_LIMIT = 100


@dataclass(frozen=True)
class EngineConfig:
    """
    Evaluation limits and policies.

    max_passes: relaxation passes per fixpoint run
    max_rounds: expander/fixpoint alternations per circuit level
    max_depth: composite nesting depth before an instance degrades to the
        missing-template policy
    missing_template: "zero" clears the outputs of an instance whose template
        is absent and keeps its inputs; "freeze" leaves the instance as is
    """
    max_passes: int = 50
    max_rounds: int = 10
    max_depth: int = 32
    missing_template: str = "zero"

    def __post_init__(self):
        for key in ("max_passes", "max_rounds", "max_depth"):
            value = getattr(self, key)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{key} must be a positive integer, got {value!r}")
        if self.max_depth > MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be at most {MAX_DEPTH_LIMIT}, got {self.max_depth}")
        if self.missing_template not in MISSING_TEMPLATE_POLICIES:
            available = ", ".join(MISSING_TEMPLATE_POLICIES)
            raise ValueError(
                f"Unknown missing_template policy '{self.missing_template}'. "
                f"Available: {available}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Build from a flat dict or one with an 'engine' section"""
        data = data or {}
        if isinstance(data.get("engine"), dict):
            data = data["engine"]
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    @classmethod
    def from_yaml(cls, path: str) -> "EngineConfig":
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data)


DEFAULT_CONFIG = EngineConfig()
