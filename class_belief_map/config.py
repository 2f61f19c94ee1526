"""
Configuration loading for the class belief map.

Bridges:
1. YAML configuration files (config/class_belief_map_base.yaml, presets/)
2. Pydantic validation models (common/param_models.py)
3. The runtime CodecConfig used by the word codec

Usage:
    from class_belief_map.config import load_map_config, CodecConfig

    params = load_map_config("/path/to/config.yaml")
    codec = CodecConfig.from_params(params.codec)
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from class_belief_map.common import constants
from class_belief_map.common.param_models import CodecParams, MapParams

PACKAGE_NAME = "class_belief_map"
CONFIG_SECTION = PACKAGE_NAME
BASE_CONFIG_NAME = "class_belief_map_base.yaml"


@dataclass(frozen=True)
class CodecConfig:
    """
    Word format shared by encoder and decoder.

    Both ends of a stream must use the same CodecConfig; nothing in the
    stream records it.
    """
    top_n: int = constants.SERIALIZE_TOP_N_COUNTS
    counter_bits: int = constants.COUNTER_SIZE_BITS

    def __post_init__(self):
        if self.top_n <= 0:
            raise ValueError(f"top_n must be positive, got {self.top_n}")
        if self.counter_bits not in constants.SUPPORTED_COUNTER_SIZE_BITS:
            raise ValueError(
                f"counter_bits must be one of {constants.SUPPORTED_COUNTER_SIZE_BITS}, got {self.counter_bits}"
            )

    @classmethod
    def from_params(cls, params: CodecParams) -> "CodecConfig":
        return cls(top_n=int(params.top_n_counts), counter_bits=int(params.counter_size_bits))

    @property
    def counter_max(self) -> int:
        return (1 << self.counter_bits) - 1

    @property
    def index_words(self) -> int:
        """Words holding the top-K class indices."""
        return math.ceil(self.top_n / (constants.WORD_BITS // constants.INDEX_BITS))

    @property
    def value_words(self) -> int:
        """Words holding the top-K counts."""
        return math.ceil(self.top_n / (constants.WORD_BITS // self.counter_bits))

    @property
    def initialized_word_count(self) -> int:
        """Words used by a class voxel with a histogram."""
        return constants.VOXEL_HEADER_WORDS + self.index_words + self.value_words


def load_yaml_config(config_path: str | Path) -> Dict[str, Any]:
    """Parsed YAML file; an empty file gives {}. Raises FileNotFoundError."""
    config_path = Path(config_path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """Recursive merge of nested dicts; later configs win. Inputs are not modified."""
    merged: Dict[str, Any] = {}
    for config in configs:
        for key, value in (config or {}).items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = merge_configs(merged[key], value)
            elif isinstance(value, dict):
                merged[key] = merge_configs(value)
            else:
                merged[key] = value
    return merged


def load_map_config(
    base_path: Optional[str | Path] = None,
    preset_path: Optional[str | Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> MapParams:
    """
    Validated MapParams from the class_belief_map section of a base YAML,
    an optional preset YAML and in-code overrides (later wins).

    Raises:
        ValidationError: If the merged configuration is invalid
    """
    sections = [
        load_yaml_config(path).get(CONFIG_SECTION, {}) if path else {}
        for path in (base_path, preset_path)
    ]
    return MapParams(**merge_configs(*sections, overrides or {}))


def _config_dir_candidates() -> Tuple[Path, ...]:
    # Source checkout first, then the data_files location used by setup.py.
    return (
        Path(__file__).resolve().parent.parent / "config",
        Path(sys.prefix) / "share" / PACKAGE_NAME / "config",
    )


def get_default_config_paths() -> Tuple[Path, Path]:
    """(base config file, presets dir) of the first config dir that exists."""
    candidates = _config_dir_candidates()
    config_dir = next((c for c in candidates if c.is_dir()), candidates[0])
    return config_dir / BASE_CONFIG_NAME, config_dir / "presets"


def get_preset_path(preset_name: str) -> Optional[Path]:
    _, presets_dir = get_default_config_paths()
    preset_path = presets_dir / f"{preset_name}.yaml"
    return preset_path if preset_path.is_file() else None
