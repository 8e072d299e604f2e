"""
Random Walk Metropolis Transition Kernel

Proposal: x' = x + step_size * z, z ~ N(0, I)
Hastings ratio: 0 (symmetric proposal, q(x'|x) = q(x|x'))
Acceptance: min(1, pi(x') / pi(x))

No momentum and no gradients. With step_size = 0 the proposal equals the
current position, the log ratio is exactly 0 and every step is accepted.
"""

from typing import Callable, Tuple

from ..runtime import Array, ops, prng
from .energy import safe_energy_diff
from .types import RWMConfig, RWMInfo, RWMState


def build_rwm_kernel(
    config: RWMConfig,
    logdensity_fn: Callable[[Array], Array],
) -> Callable[[Array, RWMState], Tuple[RWMState, RWMInfo]]:
    """
    Generate the RWM step function.

    Args:
        config: Validated RWM configuration
        logdensity_fn: Handle-level log density, Array -> scalar Array

    Returns:
        step(key, state) -> (new_state, info). The key and every field of
        state are consumed; new_state and info hold fresh handles.
    """
    step_size = config.step_size

    def rwm_step(key: Array, state: RWMState) -> Tuple[RWMState, RWMInfo]:
        noise_key, accept_key = prng.split(key, 2)

        noise = prng.normal(noise_key, state.position.shape)
        proposed_position = state.position.ref + noise * step_size
        proposed_logdensity = logdensity_fn(proposed_position.ref)

        # Energy is -log pi, so delta_energy = log pi(x) - log pi(x')
        delta_energy = safe_energy_diff(-proposed_logdensity.ref, -state.logdensity.ref)
        acceptance_prob = ops.minimum(1.0, ops.exp(-delta_energy))
        u = prng.uniform(accept_key)
        is_accepted = ops.less(u, acceptance_prob.ref)

        info = RWMInfo(
            acceptance_prob=acceptance_prob,
            is_accepted=is_accepted.ref,
            proposed_position=proposed_position.ref,
        )
        new_state = RWMState(
            position=ops.where(is_accepted.ref, proposed_position, state.position),
            logdensity=ops.where(is_accepted, proposed_logdensity, state.logdensity),
        )
        return new_state, info

    return rwm_step
