"""Bright, randomly chosen series colours."""

from typing import Dict, Optional, Sequence

import numpy as np
from matplotlib.colors import hsv_to_rgb, to_hex


def assign_colors(experiment_ids: Sequence[str], seed: Optional[int] = None) -> Dict[str, str]:
    """
    Pick a bright hex colour for each experiment.

    Colours depend only on ``seed`` and the position of each id, so a fixed
    seed reproduces the same palette for the same selection order.

    Args:
        experiment_ids: Experiments in display order
        seed: Random seed; None draws fresh colours

    Returns:
        Mapping of experiment id to ``#rrggbb``
    """
    rng = np.random.default_rng(seed)
    n = len(experiment_ids)
    hsv = np.column_stack([
        rng.uniform(0.0, 1.0, n),
        rng.uniform(0.65, 1.0, n),
        rng.uniform(0.75, 0.95, n),
    ])
    rgb = hsv_to_rgb(hsv) if n else np.empty((0, 3))
    return {experiment_id: to_hex(color) for experiment_id, color in zip(experiment_ids, rgb)}
