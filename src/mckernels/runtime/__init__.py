"""
Runtime Subpackage - Array handles over JAX.

- arrays: Reference-counted Array handle and live-handle accounting
- ops: Elementwise and reduction operations (consume their inputs)
- transforms: grad, value_and_grad, jit and lift over handle-level functions
- prng: Splittable random keys and normal/uniform draws
"""

from .arrays import Array, array, live_arrays, dispose_tree, wrap_tree, consume_tree
from .transforms import grad, value_and_grad, jit, lift, transform_counts
from . import ops
from . import prng

__all__ = [
    'Array',
    'array',
    'live_arrays',
    'dispose_tree',
    'wrap_tree',
    'consume_tree',
    'grad',
    'value_and_grad',
    'jit',
    'lift',
    'transform_counts',
    'ops',
    'prng',
]
