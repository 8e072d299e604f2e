"""
Random Walk Metropolis Kernel Tests

- Proposal construction from the split key
- Zero step size (always accepted)
- Reference counts across steps
- Compiled vs eager equivalence
- NaN log density handling

Run with: pytest tests/test_rwm.py -v
"""

import jax.numpy as jnp
import numpy as np
import pytest

from mckernels import (
    RWM,
    array,
    dispose_tree,
    jit,
    lift,
    live_arrays,
    prng,
)
from mckernels.kernels import RWMConfig, RWMState, build_rwm_kernel

from conftest import standard_normal_logdensity


def make_kernel(step_size=0.5, logdensity_fn=standard_normal_logdensity):
    return build_rwm_kernel(RWMConfig(step_size=step_size), logdensity_fn)


# ============================================================================
# PROPOSAL
# ============================================================================

class TestRWMProposal:
    """x' = x + step_size * z with z drawn from the first split sub-key."""

    def test_proposal_uses_noise_key(self, make_rwm_state, leak_check):
        step_size = 0.3
        rwm_step = make_kernel(step_size)
        new_state, info = rwm_step(prng.key(9), make_rwm_state([0.5, -1.0]))

        noise_key, accept_key = prng.split(prng.key(9), 2)
        noise = prng.normal(noise_key, (2,)).numpy()
        accept_key.dispose()

        np.testing.assert_allclose(
            info.proposed_position.ref.numpy(), np.array([0.5, -1.0]) + step_size * noise
        )
        dispose_tree((new_state, info))

    def test_zero_step_always_accepts(self, make_rwm_state, leak_check):
        rwm_step = make_kernel(step_size=0.0)
        state = make_rwm_state([1.5])
        for i in range(20):
            state, info = rwm_step(prng.key(i), state)
            assert info.acceptance_prob.ref.item() == 1.0
            assert info.is_accepted.ref.item() is True
            dispose_tree(info)

        assert state.position.ref.item() == 1.5
        dispose_tree(state)

    def test_acceptance_prob_bounds(self, make_rwm_state, leak_check):
        rwm_step = make_kernel(step_size=2.0)
        state = make_rwm_state([3.0])
        for i in range(30):
            state, info = rwm_step(prng.key(i), state)
            assert 0.0 <= info.acceptance_prob.ref.item() <= 1.0
            dispose_tree(info)
        dispose_tree(state)

    def test_rejection_keeps_position_and_logdensity(self, make_rwm_state, leak_check):
        rwm_step = make_kernel(step_size=3.0)
        state = make_rwm_state([0.0])
        rejections = 0
        for i in range(40):
            previous_position = state.position.ref.numpy()
            previous_logdensity = state.logdensity.ref.item()
            state, info = rwm_step(prng.key(i), state)
            if not info.is_accepted.ref.item():
                rejections += 1
                np.testing.assert_array_equal(state.position.ref.numpy(), previous_position)
                assert state.logdensity.ref.item() == previous_logdensity
            dispose_tree(info)

        assert rejections > 0
        dispose_tree(state)

    def test_accepted_logdensity_matches_position(self, make_rwm_state, leak_check):
        rwm_step = make_kernel(step_size=0.5)
        state = make_rwm_state([0.2, 0.4])
        for i in range(15):
            state, info = rwm_step(prng.key(i), state)
            dispose_tree(info)

        q = state.position.ref.numpy()
        assert state.logdensity.ref.item() == pytest.approx(-0.5 * float(np.sum(q ** 2)))
        dispose_tree(state)


# ============================================================================
# REFERENCE COUNTS
# ============================================================================

class TestRWMRefcount:
    """The kernel consumes the key and the old state."""

    def test_inputs_consumed(self, make_rwm_state, leak_check):
        rwm_step = make_kernel()
        key = prng.key(0)
        state = make_rwm_state([0.0])
        new_state, info = rwm_step(key, state)

        assert key.ref_count == 0
        assert state.position.ref_count == 0
        assert state.logdensity.ref_count == 0
        for field in (*new_state, *info):
            assert field.ref_count == 1
        dispose_tree((new_state, info))

    def test_no_accumulation_over_many_steps(self, make_rwm_state, leak_check):
        rwm_step = make_kernel()
        state = make_rwm_state([0.0, 0.0])
        baseline = live_arrays()

        for i in range(60):
            old_position = state.position
            state, info = rwm_step(prng.key(i), state)
            assert old_position.ref_count == 0
            assert state.position.ref_count == 1
            dispose_tree(info)
            assert live_arrays() == baseline

        dispose_tree(state)

    def test_compiled_step_no_accumulation(self, make_rwm_state, leak_check):
        rwm_step = jit(make_kernel())
        state = make_rwm_state([0.0])
        baseline = live_arrays()

        for i in range(60):
            state, info = rwm_step(prng.key(i), state)
            assert state.position.ref_count == 1
            dispose_tree(info)
            assert live_arrays() == baseline

        dispose_tree(state)


# ============================================================================
# COMPILATION
# ============================================================================

class TestRWMCompilation:
    """The compiled step computes what the eager step computes."""

    def test_compiled_matches_eager(self, make_rwm_state, leak_check):
        eager = make_kernel(step_size=0.7)
        compiled = jit(make_kernel(step_size=0.7))
        a = make_rwm_state([0.1, -0.2])
        b = make_rwm_state([0.1, -0.2])

        for i in range(25):
            a, info_a = eager(prng.key(i), a)
            b, info_b = compiled(prng.key(i), b)
            assert info_a.is_accepted.ref.item() == info_b.is_accepted.ref.item()
            dispose_tree((info_a, info_b))

        for x, y in zip(a, b):
            np.testing.assert_allclose(x.numpy(), y.numpy(), rtol=1e-10, atol=1e-12)

    def test_builder_default_is_compiled(self, leak_check):
        jitted = RWM(standard_normal_logdensity).step_size(0.7).build()
        eager = RWM(standard_normal_logdensity).step_size(0.7).jit_step(False).build()

        a = jitted.init(array([0.3]))
        b = eager.init(array([0.3]))
        for i in range(10):
            a, info_a = jitted.step(prng.key(i), a)
            b, info_b = eager.step(prng.key(i), b)
            dispose_tree((info_a, info_b))

        assert a.position.ref.item() == pytest.approx(b.position.ref.item(), rel=1e-10)
        dispose_tree((a, b))


# ============================================================================
# NUMERICAL ANOMALIES
# ============================================================================

class TestRWMNaN:
    """A NaN log density at the proposal is a rejection, not an error."""

    def test_nan_proposal_rejected(self, leak_check):
        # Finite only at the origin
        logdensity = lift(lambda q: jnp.where(q[0] == 0.0, 0.0, jnp.nan))
        rwm_step = make_kernel(step_size=1.0, logdensity_fn=logdensity)
        position = array([0.0])
        state = RWMState(position=position, logdensity=logdensity(position.ref))

        for i in range(10):
            state, info = rwm_step(prng.key(i), state)
            assert info.acceptance_prob.ref.item() == 0.0
            assert info.is_accepted.ref.item() is False
            dispose_tree(info)

        assert state.position.ref.item() == 0.0
        assert state.logdensity.ref.item() == 0.0
        dispose_tree(state)
