"""
Single-Chain Runner.

Drives a built sampler the way every caller does by hand:

    state = sampler.init(position)
    for each iteration:
        key, step_key = split(key)
        state, info = sampler.step(step_key, state)
        read what is needed from state/info, dispose info

- sample_chain: Run warmup + collection and return the draws on the host
- acceptance_rate: Mean acceptance of a trace
- summarize_trace: Mean/variance/acceptance summary for quick checks
"""

import time
from typing import Any, Dict, NamedTuple, Optional, Tuple

import numpy as np

from .runtime import Array, dispose_tree, prng

import logging
logger = logging.getLogger('mckernels')


class ChainTrace(NamedTuple):
    """Host copies of a chain's kept draws."""
    positions: np.ndarray          # (num_samples, *position_shape)
    logdensity: np.ndarray         # (num_samples,)
    acceptance_prob: np.ndarray    # (num_samples,)
    is_accepted: np.ndarray        # (num_samples,) bool
    is_divergent: Optional[np.ndarray]  # (num_samples,) bool, HMC only


def sample_chain(
    sampler,
    key: Array,
    position: Array,
    num_samples: int,
    num_warmup: int = 0,
    thin: int = 1,
) -> Tuple[ChainTrace, Any]:
    """
    Run one chain and collect its draws.

    Args:
        sampler: HMCSampler or RWMSampler (anything with init/step)
        key: PRNG key handle (consumed)
        position: Initial position handle (consumed by sampler.init)
        num_samples: Number of draws to keep
        num_warmup: Iterations discarded before collection
        thin: Keep every thin-th iteration during collection

    Returns:
        trace: ChainTrace of the kept draws
        final_state: The last chain state. Owned by the caller.
    """
    if num_samples < 0 or num_warmup < 0:
        raise ValueError("num_samples and num_warmup must be >= 0")
    if thin < 1:
        raise ValueError(f"thin must be >= 1, got {thin}")

    state = sampler.init(position)
    records = {'positions': [], 'logdensity': [], 'acceptance_prob': [],
               'is_accepted': [], 'is_divergent': []}
    total_iter = num_warmup + num_samples * thin

    logger.info(f"Sampling {num_samples} draws ({num_warmup} warmup, thin={thin})...")
    start_time = time.perf_counter()

    for i in range(total_iter):
        key, step_key = prng.split(key, 2)
        state, info = sampler.step(step_key, state)

        collecting = i >= num_warmup and (i - num_warmup) % thin == thin - 1
        if collecting:
            records['positions'].append(state.position.ref.numpy())
            records['logdensity'].append(state.logdensity.ref.item())
            records['acceptance_prob'].append(info.acceptance_prob.ref.item())
            records['is_accepted'].append(info.is_accepted.ref.item())
            if hasattr(info, 'is_divergent'):
                records['is_divergent'].append(info.is_divergent.ref.item())

        dispose_tree(info)

    key.dispose()
    wall_time = time.perf_counter() - start_time

    trace = ChainTrace(
        positions=np.asarray(records['positions']),
        logdensity=np.asarray(records['logdensity']),
        acceptance_prob=np.asarray(records['acceptance_prob']),
        is_accepted=np.asarray(records['is_accepted'], dtype=bool),
        is_divergent=(
            np.asarray(records['is_divergent'], dtype=bool) if records['is_divergent'] else None
        ),
    )
    if num_samples > 0:
        logger.info(
            f"  Done in {wall_time:.2f}s, acceptance rate {acceptance_rate(trace):.1%}"
        )
    return trace, state


def acceptance_rate(trace: ChainTrace) -> float:
    """Fraction of kept transitions that were accepted."""
    if trace.is_accepted.size == 0:
        return float('nan')
    return float(np.mean(trace.is_accepted))


def summarize_trace(trace: ChainTrace) -> Dict[str, Any]:
    """
    Summary statistics of a trace.

    Returns:
        Dict with per-dimension 'mean' and 'variance', 'acceptance_rate'
        and (for HMC) 'num_divergent'
    """
    summary = {
        'num_draws': int(trace.positions.shape[0]),
        'mean': np.mean(trace.positions, axis=0),
        'variance': np.var(trace.positions, axis=0, ddof=1),
        'acceptance_rate': acceptance_rate(trace),
    }
    if trace.is_divergent is not None:
        summary['num_divergent'] = int(np.sum(trace.is_divergent))
    return summary
