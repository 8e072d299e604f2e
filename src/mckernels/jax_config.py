"""
JAX Configuration - MUST be imported before any JAX imports.

This module sets environment variables for JAX configuration including:
- XLA C++ log verbosity
- Persistent compilation cache directory (jit_step / value_and_grad(jit=True))
- Minimum compile time threshold for caching
"""
import os
from pathlib import Path

# Suppress CUDA/XLA C++ warnings (GPU interconnect, NUMA, cuDNN factories)
os.environ.setdefault('TF_CPP_MIN_LOG_LEVEL', '2')

# --- PERSISTENT COMPILATION CACHE ---
# Enables cross-session caching of compiled step functions
_JAX_CACHE_DIR = Path.home() / ".cache" / "jax" / "mckernels_cache"
_JAX_CACHE_DIR.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("JAX_COMPILATION_CACHE_DIR", str(_JAX_CACHE_DIR))
os.environ.setdefault("JAX_PERSISTENT_CACHE_MIN_COMPILE_TIME_SECS", "1.0")
