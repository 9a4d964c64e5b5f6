"""Tunable weights and thresholds for reference tracking.

Settings can be loaded from a YAML file; every key is optional and unknown
keys are rejected:

    acceptance_threshold: 0.7
    round_scores: false
    directory_similarity: 75
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml

# Keys whose values are fractions in [0, 1]
_UNIT_INTERVAL_KEYS = (
    "hamming_context_weight",
    "hamming_content_weight",
    "score_content_weight",
    "score_context_weight",
    "mapping_floor",
    "acceptance_threshold",
    "split_threshold",
)

# Keys whose values are integer percentages
_PERCENT_KEYS = ("directory_similarity", "rename_similarity")


@dataclass(frozen=True)
class TrackerSettings:
    """Weights and thresholds used by the line relocator and history resolver."""

    shingle_size: int = 2
    sim_hash_bits: int = 32
    context_lines: int = 3
    cosine_shingle_size: int = 3
    hamming_context_weight: float = 0.40
    hamming_content_weight: float = 0.60
    score_content_weight: float = 0.6
    score_context_weight: float = 0.4
    mapping_floor: float = 0.45
    acceptance_threshold: float = 0.65
    split_threshold: float = 0.85
    round_scores: bool = True
    score_rounding_step: float = 0.05
    directory_similarity: int = 60
    rename_similarity: int = 60

    # --------------------------------------------------------
    # Factory Methods
    # --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict | None) -> TrackerSettings:
        """Build settings from a mapping, validating keys and ranges.

        Raises:
            ValueError: For unknown keys, wrong types or out-of-range values
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"Settings must be a mapping, got {type(data).__name__}")

        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")

        values = {}
        for key, value in data.items():
            default = getattr(cls, key)
            if isinstance(default, bool):
                if not isinstance(value, bool):
                    raise ValueError(f"Setting {key} must be true or false, got {value!r}")
            elif isinstance(default, int):
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"Setting {key} must be an integer, got {value!r}")
            elif isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Setting {key} must be a number, got {value!r}")
            values[key] = value

        settings = cls(**values)
        settings.validate()
        return settings

    @classmethod
    def from_file(cls, path: str | Path) -> TrackerSettings:
        """Load settings from a YAML file.

        Raises:
            ValueError: If the file is missing, is not valid YAML or holds
                invalid settings
        """
        settings_path = Path(path)
        if not settings_path.is_file():
            raise ValueError(f"Settings file does not exist: {path}")

        try:
            data = yaml.safe_load(settings_path.read_text())
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in settings file {path}: {e}")

        return cls.from_dict(data)

    # --------------------------------------------------------
    # Public API
    # --------------------------------------------------------

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ValueError: If any value is out of range
        """
        for key in ("shingle_size", "cosine_shingle_size", "sim_hash_bits"):
            if getattr(self, key) < 1:
                raise ValueError(f"Setting {key} must be at least 1")
        if self.sim_hash_bits > 32:
            raise ValueError("Setting sim_hash_bits must not exceed 32")
        if self.context_lines < 0:
            raise ValueError("Setting context_lines must not be negative")
        for key in _UNIT_INTERVAL_KEYS:
            value = getattr(self, key)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Setting {key} must be between 0 and 1, got {value}")
        if not 0.0 < self.score_rounding_step <= 1.0:
            raise ValueError("Setting score_rounding_step must be in (0, 1]")
        for key in _PERCENT_KEYS:
            value = getattr(self, key)
            if not 0 <= value <= 100:
                raise ValueError(f"Setting {key} must be between 0 and 100, got {value}")

    def to_dict(self) -> dict:
        return asdict(self)
