"""
Sampler Builders

Immutable fluent configuration that assembles a sampler:

    sampler = (
        HMC(logdensity_fn)
        .step_size(0.1)
        .num_integration_steps(10)
        .inverse_mass_matrix(array([1.0, 1.0]))
        .build()
    )
    state = sampler.init(array([0.0, 0.0]))
    state, info = sampler.step(prng.key(0), state)

Every setter returns a new builder; the receiver is never modified, so a
partially configured builder can be shared and specialised safely.

build() validates the options (raising ConfigurationError with every
problem found), fills defaults, and wires Metric + Integrator + Kernel.
"""

from dataclasses import dataclass, replace
from typing import Callable, NamedTuple, Optional, Tuple

from .error_handling import validate_hmc_options, validate_rwm_options
from .kernels import (
    GaussianEuclidean,
    VelocityVerlet,
    HMCConfig,
    HMCState,
    HMCInfo,
    RWMConfig,
    RWMState,
    RWMInfo,
    build_hmc_kernel,
    build_rwm_kernel,
)
from .runtime import Array, grad, jit, value_and_grad

import logging
logger = logging.getLogger('mckernels')

DEFAULT_DIVERGENCE_THRESHOLD = 1000.0
DEFAULT_JIT_STEP = True

LogDensityFn = Callable[[Array], Array]


class HMCSampler(NamedTuple):
    init: Callable[[Array], HMCState]
    step: Callable[[Array, HMCState], Tuple[HMCState, HMCInfo]]


class RWMSampler(NamedTuple):
    init: Callable[[Array], RWMState]
    step: Callable[[Array, RWMState], Tuple[RWMState, RWMInfo]]


@dataclass(frozen=True)
class HMCOptions:
    """Partially specified HMC options (None = not set)."""
    step_size: Optional[float] = None
    num_integration_steps: Optional[int] = None
    inverse_mass_matrix: Optional[Array] = None
    divergence_threshold: Optional[float] = None
    value_and_grad: bool = False
    jit: bool = False


@dataclass(frozen=True)
class RWMOptions:
    """Partially specified RWM options (None = not set)."""
    step_size: Optional[float] = None
    jit_step: Optional[bool] = None


class HMCBuilder:
    """
    Builder for Hamiltonian Monte Carlo samplers.

    Required: step_size, num_integration_steps, inverse_mass_matrix.
    Optional: divergence_threshold (default 1000), value_and_grad(jit=...).
    """

    def __init__(self, logdensity_fn: LogDensityFn, options: Optional[HMCOptions] = None):
        self._logdensity_fn = logdensity_fn
        self._options = options if options is not None else HMCOptions()

    def _with(self, **changes) -> 'HMCBuilder':
        return HMCBuilder(self._logdensity_fn, replace(self._options, **changes))

    @property
    def options(self) -> HMCOptions:
        return self._options

    def step_size(self, value: float) -> 'HMCBuilder':
        return self._with(step_size=value)

    def num_integration_steps(self, value: int) -> 'HMCBuilder':
        return self._with(num_integration_steps=value)

    def inverse_mass_matrix(self, value: Array) -> 'HMCBuilder':
        """Diagonal of M^-1. The caller keeps ownership; build() takes its own reference."""
        return self._with(inverse_mass_matrix=value)

    def divergence_threshold(self, value: float) -> 'HMCBuilder':
        return self._with(divergence_threshold=value)

    def value_and_grad(self, jit: bool = False) -> 'HMCBuilder':
        """Use one fused value-and-gradient evaluation per leapfrog step, optionally jit-compiled."""
        return self._with(value_and_grad=True, jit=jit)

    def _validate_and_fill_defaults(self) -> HMCConfig:
        validate_hmc_options(vars(self._options))
        threshold = self._options.divergence_threshold
        return HMCConfig(
            step_size=float(self._options.step_size),
            num_integration_steps=int(self._options.num_integration_steps),
            inverse_mass_matrix=self._options.inverse_mass_matrix,
            divergence_threshold=(
                DEFAULT_DIVERGENCE_THRESHOLD if threshold is None else float(threshold)
            ),
        )

    def build(self) -> HMCSampler:
        config = self._validate_and_fill_defaults()
        logdensity_fn = self._logdensity_fn

        logdensity_and_grad_fn = None
        if self._options.value_and_grad:
            logdensity_and_grad_fn = value_and_grad(logdensity_fn)
            if self._options.jit:
                logdensity_and_grad_fn = jit(logdensity_and_grad_fn)

        metric = GaussianEuclidean(config.inverse_mass_matrix.ref)
        integrator = VelocityVerlet(
            logdensity_fn, metric.kinetic_energy, logdensity_and_grad_fn
        )
        step = build_hmc_kernel(config, metric, integrator)
        logdensity_grad_fn = grad(logdensity_fn) if logdensity_and_grad_fn is None else None

        def init(position: Array) -> HMCState:
            if logdensity_and_grad_fn is not None:
                logdensity, logdensity_grad = logdensity_and_grad_fn(position.ref)
            else:
                logdensity = logdensity_fn(position.ref)
                logdensity_grad = logdensity_grad_fn(position.ref)
            return HMCState(
                position=position,
                logdensity=logdensity,
                logdensity_grad=logdensity_grad,
            )

        logger.debug(
            f"Built HMC sampler: step_size={config.step_size}, "
            f"num_integration_steps={config.num_integration_steps}, "
            f"divergence_threshold={config.divergence_threshold}, "
            f"value_and_grad={self._options.value_and_grad}, jit={self._options.jit}"
        )
        return HMCSampler(init=init, step=step)


class RWMBuilder:
    """
    Builder for Random Walk Metropolis samplers.

    Required: step_size (>= 0). Optional: jit_step (default on).
    """

    def __init__(self, logdensity_fn: LogDensityFn, options: Optional[RWMOptions] = None):
        self._logdensity_fn = logdensity_fn
        self._options = options if options is not None else RWMOptions()

    def _with(self, **changes) -> 'RWMBuilder':
        return RWMBuilder(self._logdensity_fn, replace(self._options, **changes))

    @property
    def options(self) -> RWMOptions:
        return self._options

    def step_size(self, value: float) -> 'RWMBuilder':
        return self._with(step_size=value)

    def jit_step(self, value: bool = True) -> 'RWMBuilder':
        return self._with(jit_step=value)

    def build(self) -> RWMSampler:
        validate_rwm_options(vars(self._options))
        config = RWMConfig(step_size=float(self._options.step_size))
        use_jit = DEFAULT_JIT_STEP if self._options.jit_step is None else self._options.jit_step
        logdensity_fn = self._logdensity_fn

        kernel = build_rwm_kernel(config, logdensity_fn)
        step = jit(kernel) if use_jit else kernel

        def init(position: Array) -> RWMState:
            return RWMState(position=position, logdensity=logdensity_fn(position.ref))

        logger.debug(f"Built RWM sampler: step_size={config.step_size}, jit_step={use_jit}")
        return RWMSampler(init=init, step=step)


def HMC(logdensity_fn: LogDensityFn) -> HMCBuilder:
    """Start configuring an HMC sampler for the given log density."""
    return HMCBuilder(logdensity_fn)


def RWM(logdensity_fn: LogDensityFn) -> RWMBuilder:
    """Start configuring a Random Walk Metropolis sampler for the given log density."""
    return RWMBuilder(logdensity_fn)
