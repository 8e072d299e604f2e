"""
Energy difference for Metropolis acceptance.
"""

import numpy as np

from ..runtime import Array, ops


def safe_energy_diff(proposal_energy: Array, initial_energy: Array) -> Array:
    """
    proposal_energy - initial_energy, with NaN mapped to +inf.

    A numerically broken trajectory then has acceptance probability
    exp(-inf) = 0 and is always rejected. Consumes both arguments.
    """
    raw = proposal_energy - initial_energy
    return ops.where(ops.isnan(raw.ref), np.inf, raw)
