"""
mckernels - MCMC Transition Kernels with Explicit Array Ownership

Public API:
    Samplers:
        HMC - Start an HMCBuilder for a log density
        RWM - Start an RWMBuilder for a log density
        HMCBuilder, RWMBuilder - Immutable fluent builders
        HMCSampler, RWMSampler - (init, step) pairs returned by build()

    Kernel building blocks:
        GaussianEuclidean - Diagonal metric (kinetic energy, momentum draws)
        VelocityVerlet - Leapfrog integrator
        build_hmc_kernel, build_rwm_kernel - Step function factories
        HMCState, HMCInfo, RWMState, RWMInfo, IntegratorState - Records

    Array runtime:
        Array, array - Reference-counted handles over JAX arrays
        ops, prng - Operations and random keys on handles
        grad, value_and_grad, jit, lift - Transforms over handle functions
        live_arrays, dispose_tree, transform_counts - Ownership bookkeeping

    Running and diagnostics:
        sample_chain - Run one chain and collect its draws
        summarize_trace, acceptance_rate - Trace summaries
        diagnose_chain, print_diagnostics - Post-hoc chain checks
        configure - Precision and log level

    Errors:
        ConfigurationError - Raised by build() on missing/invalid options
        UseAfterDisposeError - A handle was used after its last reference

Example:
    from mckernels import HMC, array, prng

    def logdensity(q):
        return (q.ref * q).sum() * -0.5

    sampler = (
        HMC(logdensity)
        .step_size(0.1)
        .num_integration_steps(10)
        .inverse_mass_matrix(array([1.0]))
        .build()
    )
    state = sampler.init(array([0.0]))
    state, info = sampler.step(prng.key(0), state)
"""
# CRITICAL: Import jax_config FIRST to set environment variables before JAX loads
from . import jax_config  # noqa: F401

from .error_handling import (
    ConfigurationError,
    UseAfterDisposeError,
    diagnose_chain,
    print_diagnostics,
)
from .config import configure
from .runtime import (
    Array,
    array,
    live_arrays,
    dispose_tree,
    grad,
    value_and_grad,
    jit,
    lift,
    transform_counts,
    ops,
    prng,
)
from .kernels import (
    HMCState,
    HMCInfo,
    HMCConfig,
    IntegratorState,
    RWMState,
    RWMInfo,
    RWMConfig,
    GaussianEuclidean,
    VelocityVerlet,
    safe_energy_diff,
    build_hmc_kernel,
    build_rwm_kernel,
)
from .builders import (
    HMC,
    RWM,
    HMCBuilder,
    RWMBuilder,
    HMCSampler,
    RWMSampler,
)
from .sampling import (
    ChainTrace,
    sample_chain,
    acceptance_rate,
    summarize_trace,
)
