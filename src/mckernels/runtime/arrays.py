"""
Reference-Counted Array Handles.

JAX arrays are immutable and garbage collected. The kernels in this package
follow an explicit ownership discipline instead, so that leaks and
double-use are detectable in tests:

- Array(value): wraps a JAX array (or tracer) with one owning reference
- .ref: takes an additional owning reference and returns the same handle
- .dispose(): releases one reference; at zero the value is dropped
- any operation that reads the value consumes one reference

Using a handle whose count has reached zero raises UseAfterDisposeError.
The number of live handles is tracked at module level (live_arrays) so a
test can assert that a loop of sampler steps does not accumulate handles.

Example:
    q = array([1.0, 2.0])
    energy = (q.ref * q).sum() * 0.5   # q is consumed here
    value = energy.item()              # energy is consumed here
"""

from typing import Any

import jax
import jax.numpy as jnp
import numpy as np

from ..error_handling import UseAfterDisposeError

# Number of handles currently holding at least one reference
_LIVE_COUNT = 0


def live_arrays() -> int:
    """Number of Array handles that have not been fully disposed."""
    return _LIVE_COUNT


def _value_of(x):
    """Consume x if it is a handle, otherwise pass the scalar through."""
    if isinstance(x, Array):
        return x._consume()
    return x


class Array:
    """
    Owning handle around a JAX value.

    The handle starts with a reference count of 1. Arithmetic operators
    consume both operands and return a fresh handle, so expressions read
    like NumPy while every input is released exactly once:

        p_half = p + grad.ref * (0.5 * step_size)

    consumes p, borrows grad (the .ref is consumed by the multiply) and
    leaves grad with the count it had before.
    """
    __slots__ = ('_value', '_ref_count', '__weakref__')

    # Make NumPy scalars defer to our reflected operators
    __array_ufunc__ = None

    def __init__(self, value):
        global _LIVE_COUNT
        self._value = value
        self._ref_count = 1
        _LIVE_COUNT += 1

    # --- ownership ---

    @property
    def ref_count(self) -> int:
        return self._ref_count

    @property
    def ref(self) -> 'Array':
        self._check_alive('ref')
        self._ref_count += 1
        return self

    def dispose(self) -> None:
        global _LIVE_COUNT
        self._check_alive('dispose')
        self._ref_count -= 1
        if self._ref_count == 0:
            self._value = None
            _LIVE_COUNT -= 1

    def _check_alive(self, action: str) -> None:
        if self._ref_count <= 0:
            raise UseAfterDisposeError(
                f"Cannot {action} an array whose reference count is {self._ref_count}"
            )

    def _consume(self):
        self._check_alive('read')
        value = self._value
        self.dispose()
        return value

    # --- metadata (does not consume) ---

    @property
    def shape(self) -> tuple:
        self._check_alive('read shape of')
        return tuple(self._value.shape)

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def dtype(self):
        self._check_alive('read dtype of')
        return self._value.dtype

    def __repr__(self):
        if self._ref_count <= 0:
            return "Array(<disposed>)"
        return f"Array({self._value!r}, ref_count={self._ref_count})"

    # --- host transfer (consumes) ---

    def numpy(self) -> np.ndarray:
        return np.asarray(self._consume())

    def item(self) -> Any:
        return self.numpy().item()

    # --- arithmetic (consumes every handle operand) ---

    def _binary(self, other, op, reflected=False):
        lhs = self._consume()
        rhs = _value_of(other)
        if reflected:
            lhs, rhs = rhs, lhs
        return Array(op(lhs, rhs))

    def __add__(self, other):
        return self._binary(other, jnp.add)

    def __radd__(self, other):
        return self._binary(other, jnp.add, reflected=True)

    def __sub__(self, other):
        return self._binary(other, jnp.subtract)

    def __rsub__(self, other):
        return self._binary(other, jnp.subtract, reflected=True)

    def __mul__(self, other):
        return self._binary(other, jnp.multiply)

    def __rmul__(self, other):
        return self._binary(other, jnp.multiply, reflected=True)

    def __truediv__(self, other):
        return self._binary(other, jnp.divide)

    def __rtruediv__(self, other):
        return self._binary(other, jnp.divide, reflected=True)

    def __lt__(self, other):
        return self._binary(other, jnp.less)

    def __gt__(self, other):
        return self._binary(other, jnp.greater)

    def __neg__(self):
        return Array(jnp.negative(self._consume()))

    def sum(self) -> 'Array':
        return Array(jnp.sum(self._consume()))


def array(obj, dtype=None) -> Array:
    """Create a fresh handle from a Python/NumPy/JAX value."""
    if isinstance(obj, Array):
        return Array(jnp.asarray(obj._consume(), dtype=dtype))
    return Array(jnp.asarray(obj, dtype=dtype))


def wrap_tree(tree):
    """Wrap every JAX array leaf of a pytree in a fresh handle."""
    return jax.tree_util.tree_map(
        lambda v: Array(v) if isinstance(v, jax.Array) else v, tree
    )


def consume_tree(tree):
    """Consume every handle leaf of a pytree, returning the raw values."""
    return jax.tree_util.tree_map(_value_of, tree)


def dispose_tree(tree) -> None:
    """Dispose every handle in a pytree (e.g. a State or Info record)."""
    for leaf in jax.tree_util.tree_leaves(tree):
        if isinstance(leaf, Array):
            leaf.dispose()
