"""
Hamiltonian Monte Carlo Transition Kernel

One transition = resample momentum -> integrate -> Metropolis accept/reject:

    p ~ N(0, M)
    H0 = -log pi(q) + K(p)
    (q*, p*) = leapfrog^L(q, p)
    H1 = -log pi(q*) + K(p*)
    accept with probability min(1, exp(H0 - H1))

The accept/reject is a branchless select (ops.where) so the step can be
traced by jax.jit. Numerical blow-up never raises: a NaN energy change is
treated as +inf (always rejected) and a change above the divergence
threshold is reported through info.is_divergent.
"""

from typing import Callable, Tuple

from ..runtime import Array, ops, prng
from .energy import safe_energy_diff
from .integrator import VelocityVerlet
from .metric import GaussianEuclidean
from .types import HMCConfig, HMCInfo, HMCState, IntegratorState


def build_hmc_kernel(
    config: HMCConfig,
    metric: GaussianEuclidean,
    integrator: VelocityVerlet,
) -> Callable[[Array, HMCState], Tuple[HMCState, HMCInfo]]:
    """
    Generate the HMC step function.

    Args:
        config: Validated HMC configuration
        metric: Metric supplying momentum draws and kinetic energy
        integrator: Leapfrog integrator built on the same metric

    Returns:
        step(key, state) -> (new_state, info). The key and every field of
        state are consumed; new_state and info hold fresh handles.
    """
    step_size = config.step_size
    num_integration_steps = config.num_integration_steps
    divergence_threshold = config.divergence_threshold

    def hmc_step(key: Array, state: HMCState) -> Tuple[HMCState, HMCInfo]:
        key_momentum, key_accept = prng.split(key, 2)

        momentum = metric.sample_momentum(key_momentum, state.position.ref)
        initial_energy = -state.logdensity.ref + metric.kinetic_energy(momentum.ref)

        integ_state = IntegratorState(
            position=state.position.ref,
            momentum=momentum.ref,
            logdensity=state.logdensity.ref,
            logdensity_grad=state.logdensity_grad.ref,
        )
        for _ in range(num_integration_steps):
            integ_state = integrator.step(integ_state, step_size)

        proposal_energy = (
            -integ_state.logdensity.ref + metric.kinetic_energy(integ_state.momentum)
        )

        # Metropolis-Hastings acceptance
        delta_energy = safe_energy_diff(proposal_energy.ref, initial_energy)
        is_divergent = ops.greater(delta_energy.ref, divergence_threshold)
        acceptance_prob = ops.minimum(1.0, ops.exp(-delta_energy))
        u = prng.uniform(key_accept)
        is_accepted = ops.less(u, acceptance_prob.ref)

        # Select consumes both branches: the rejected side is released here
        new_state = HMCState(
            position=ops.where(is_accepted.ref, integ_state.position, state.position),
            logdensity=ops.where(is_accepted.ref, integ_state.logdensity, state.logdensity),
            logdensity_grad=ops.where(
                is_accepted.ref, integ_state.logdensity_grad, state.logdensity_grad
            ),
        )
        info = HMCInfo(
            momentum=momentum,
            acceptance_prob=acceptance_prob,
            is_accepted=is_accepted,
            is_divergent=is_divergent,
            energy=proposal_energy,
            num_integration_steps=num_integration_steps,
        )
        return new_state, info

    return hmc_step
