"""Configuration for the subdivision passes."""

import itertools
from typing import Dict, Optional

# Numerical constants
EPSILON = 1e-7
NEIGHBOUR_OFFSETS = tuple(itertools.product((-1, 0, 1), repeat=3))

WEIGHT_RULES = ("kobbelt", "legacy")
ALGORITHMS = ("catmull_clark", "root_three")

DEFAULT_CONFIG = {
    "progress": False,
    "check_manifold": True,
    "root_three_weights": "kobbelt",
}


def default_cfg() -> Dict:
    """Default configuration for a single subdivision pass."""
    return DEFAULT_CONFIG.copy()


def resolve_cfg(cfg: Optional[Dict] = None) -> Dict:
    """Merge user overrides over the defaults and validate the weight rule."""
    config = default_cfg()
    if cfg:
        unknown = set(cfg) - set(config)
        if unknown:
            raise KeyError("Unknown configuration keys: {}".format(sorted(unknown)))
        config.update(cfg)
    if config["root_three_weights"] not in WEIGHT_RULES:
        raise ValueError("root_three_weights must be one of {}, got {!r}".format(
            WEIGHT_RULES, config["root_three_weights"]))
    return config
