"""
Pseudorandom key handles.

Keys are Array handles around jax.random keys. Every draw consumes the key
it is given; call split() first when a key is needed more than once.
"""

import jax.random as random

from .arrays import Array


def key(seed: int) -> Array:
    return Array(random.PRNGKey(seed))


def split(key: Array, num: int = 2) -> tuple:
    """Split a key into num independent sub-keys (consumes key)."""
    keys = random.split(key._consume(), num)
    return tuple(Array(keys[i]) for i in range(num))


def normal(key: Array, shape=(), dtype=None) -> Array:
    """Standard normal draws of the given shape (consumes key)."""
    if dtype is None:
        return Array(random.normal(key._consume(), shape=tuple(shape)))
    return Array(random.normal(key._consume(), shape=tuple(shape), dtype=dtype))


def uniform(key: Array, shape=(), dtype=None) -> Array:
    """Uniform draws on [0, 1) of the given shape (consumes key)."""
    if dtype is None:
        return Array(random.uniform(key._consume(), shape=tuple(shape)))
    return Array(random.uniform(key._consume(), shape=tuple(shape), dtype=dtype))
