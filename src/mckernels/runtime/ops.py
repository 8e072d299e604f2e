"""
Elementwise and reduction operations on Array handles.

Every function consumes its Array arguments and returns a fresh handle.
Python scalars may be passed wherever an Array is accepted.
"""

import jax.numpy as jnp

from .arrays import Array, _value_of


def where(condition, x, y) -> Array:
    """Branchless select: x where condition holds, y elsewhere."""
    return Array(jnp.where(_value_of(condition), _value_of(x), _value_of(y)))


def minimum(x, y) -> Array:
    return Array(jnp.minimum(_value_of(x), _value_of(y)))


def greater(x, y) -> Array:
    return Array(jnp.greater(_value_of(x), _value_of(y)))


def less(x, y) -> Array:
    return Array(jnp.less(_value_of(x), _value_of(y)))


def exp(x) -> Array:
    return Array(jnp.exp(_value_of(x)))


def sqrt(x) -> Array:
    return Array(jnp.sqrt(_value_of(x)))


def reciprocal(x) -> Array:
    return Array(jnp.reciprocal(_value_of(x)))


def isnan(x) -> Array:
    return Array(jnp.isnan(_value_of(x)))


def sum(x) -> Array:
    return Array(jnp.sum(_value_of(x)))
