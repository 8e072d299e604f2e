"""
Runtime Configuration.

- configure: Set numerical precision and the package log level
"""

from typing import Optional, Union

import jax
import jax.numpy as jnp

import logging
logger = logging.getLogger('mckernels')


def configure(use_double: bool = False, log_level: Optional[Union[int, str]] = None):
    """
    Configure JAX precision and package logging.

    Precision must be chosen before any arrays are created; arrays made
    under one setting keep their dtype.

    Args:
        use_double: Enable 64-bit floats (jax_enable_x64)
        log_level: Level for the 'mckernels' logger (e.g. logging.INFO or "DEBUG")

    Returns:
        The default float dtype now in effect
    """
    if log_level is not None:
        logger.setLevel(log_level)

    # Configure JAX precision
    if use_double:
        jax.config.update("jax_enable_x64", True)
        jnp_float_dtype = jnp.float64
    else:
        jax.config.update("jax_enable_x64", False)
        jnp_float_dtype = jnp.float32

    logger.debug(f"Configured mckernels: use_double={use_double}, float dtype={jnp_float_dtype.__name__}")
    return jnp_float_dtype
