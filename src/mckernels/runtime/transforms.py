"""
Function transforms over Array handles.

- grad / value_and_grad: autodiff of a handle-level log density
- jit: compile a handle-level function over pytrees of handles
- lift: adapt a pure jax.numpy function to the handle calling convention

A handle-level function takes Array arguments, consumes them, and returns
fresh Arrays. Each transform runs the wrapped function on handles around
JAX tracers, then hands the raw values to the corresponding jax transform.

Building a transform is not free (jax caches compiled artifacts per
wrapped callable), so samplers construct each transform once per
component and reuse it for every step. The construction counters exposed
by transform_counts() make that contract testable.
"""

import functools
from collections import Counter
from typing import Callable, Dict

import jax

from .arrays import Array, wrap_tree, consume_tree

_TRANSFORM_COUNTS = Counter()


def transform_counts() -> Dict[str, int]:
    """Number of grad / value_and_grad / jit transforms built so far."""
    return dict(_TRANSFORM_COUNTS)


def _as_pure(fn: Callable) -> Callable:
    """View a handle-level function as a pure function on raw values."""
    def pure(*values):
        return consume_tree(fn(*wrap_tree(values)))
    return pure


def grad(fn: Callable[[Array], Array]) -> Callable[[Array], Array]:
    """
    Gradient of a scalar handle-level function.

    Args:
        fn: Function mapping an Array to a scalar Array

    Returns:
        Function mapping an Array x to an Array holding d fn / d x.
        The argument is consumed.
    """
    _TRANSFORM_COUNTS['grad'] += 1
    grad_fn = jax.grad(_as_pure(fn))

    @functools.wraps(fn)
    def wrapped(x: Array) -> Array:
        return Array(grad_fn(x._consume()))
    return wrapped


def value_and_grad(fn: Callable[[Array], Array]) -> Callable[[Array], tuple]:
    """
    Fused value and gradient of a scalar handle-level function.

    Returns:
        Function mapping an Array x to (fn(x), d fn / d x). The argument is consumed.
    """
    _TRANSFORM_COUNTS['value_and_grad'] += 1
    vg_fn = jax.value_and_grad(_as_pure(fn))

    @functools.wraps(fn)
    def wrapped(x: Array) -> tuple:
        value, gradient = vg_fn(x._consume())
        return Array(value), Array(gradient)
    return wrapped


def jit(fn: Callable) -> Callable:
    """
    Compile a handle-level function with jax.jit.

    Arguments may be pytrees (NamedTuples, tuples) of Arrays and Python
    scalars; handles in them are consumed. Outputs are returned as fresh
    handles. The compiled function computes exactly what fn computes.
    """
    _TRANSFORM_COUNTS['jit'] += 1
    compiled = jax.jit(_as_pure(fn))

    @functools.wraps(fn)
    def wrapped(*args):
        return wrap_tree(compiled(*consume_tree(args)))
    return wrapped


def lift(fn: Callable) -> Callable:
    """
    Adapt a pure jax.numpy function to the handle calling convention.

    Example:
        logdensity = lift(lambda q: -0.5 * jnp.sum(q ** 2))
    """
    @functools.wraps(fn)
    def wrapped(*args):
        return wrap_tree(fn(*consume_tree(args)))
    return wrapped
