import os
from typing import Any, Dict

import numpy as np
import pytest

from class_belief_map.config import CodecConfig

# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def config_dir() -> str:
    """Directory holding the shipped YAML configuration."""
    test_dir = os.path.dirname(__file__)
    pkg_root = os.path.dirname(test_dir)
    return os.path.join(pkg_root, "config")


@pytest.fixture
def base_config_path(config_dir) -> str:
    return os.path.join(config_dir, "class_belief_map_base.yaml")


@pytest.fixture
def uncertainty_preset_path(config_dir) -> str:
    return os.path.join(config_dir, "presets", "uncertainty.yaml")


@pytest.fixture
def codec() -> CodecConfig:
    """Default word format (K=3, 16-bit counts)."""
    return CodecConfig()


@pytest.fixture
def narrow_codec() -> CodecConfig:
    """Word format with 8-bit counts."""
    return CodecConfig(top_n=3, counter_bits=8)


# =============================================================================
# Test Utility Fixtures
# =============================================================================


@pytest.fixture
def rng():
    """Seeded generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def labelled_frame() -> Dict[str, Any]:
    """Points spread over two voxels of one block and one voxel of another."""
    points = np.array(
        [
            [0.01, 0.01, 0.01],
            [0.02, 0.02, 0.02],
            [0.03, 0.01, 0.04],
            [0.07, 0.01, 0.01],
            [1.01, 0.01, 0.01],
        ],
        dtype=np.float64,
    )
    class_ids = np.array([1, 1, 2, 4, 7], dtype=np.int64)
    return {"points": points, "class_ids": class_ids}
