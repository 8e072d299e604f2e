"""
Error Handling and Validation Utilities for MCMC Kernels

This module provides the exception types, configuration validation for the
sampler builders, and post-hoc diagnostic tools for sampled chains.

Errors fall into three groups:
    ConfigurationError - raised by build() for missing or invalid parameters
    UseAfterDisposeError - an array handle was used after its last reference
        was released (a bug in the calling code, never an expected condition)
    Numerical anomalies - NaN energies and divergences are reported as data
        in the step diagnostics and never raised
"""

from typing import Any, Dict, List

import numpy as np

import logging
logger = logging.getLogger('mckernels')


class ConfigurationError(ValueError):
    """A sampler builder was asked to build with missing or invalid parameters."""


class UseAfterDisposeError(ReferenceError):
    """An array handle was read, referenced or disposed after reaching zero references."""


def _raise_if_errors(kind: str, errors: List[str]) -> None:
    if errors:
        raise ConfigurationError(f"Invalid {kind} configuration:\n  " + "\n  ".join(errors))


def validate_hmc_options(options: Dict[str, Any]) -> None:
    """
    Validates HMC builder options.

    Args:
        options: Dict with keys step_size, num_integration_steps,
            inverse_mass_matrix and divergence_threshold (None when unset)

    Raises:
        ConfigurationError: If any option is missing or invalid
    """
    errors = []

    step_size = options.get('step_size')
    if step_size is None:
        errors.append("step_size required")
    elif not step_size > 0:
        errors.append(f"step_size must be > 0, got {step_size}")

    num_steps = options.get('num_integration_steps')
    if num_steps is None:
        errors.append("num_integration_steps required")
    elif isinstance(num_steps, bool) or int(num_steps) != num_steps or num_steps < 1:
        errors.append(f"num_integration_steps must be a positive integer, got {num_steps}")

    inverse_mass_matrix = options.get('inverse_mass_matrix')
    if inverse_mass_matrix is None:
        errors.append("inverse_mass_matrix required")
    elif inverse_mass_matrix.ref_count < 1:
        errors.append("inverse_mass_matrix has already been disposed")
    elif inverse_mass_matrix.ndim != 1:
        errors.append(
            f"inverse_mass_matrix must be a 1-D diagonal, got shape {inverse_mass_matrix.shape}"
        )

    threshold = options.get('divergence_threshold')
    if threshold is not None and np.isnan(threshold):
        errors.append("divergence_threshold must not be NaN")

    _raise_if_errors("HMC", errors)


def validate_rwm_options(options: Dict[str, Any]) -> None:
    """
    Validates RWM builder options.

    Raises:
        ConfigurationError: If step_size is missing or negative
    """
    errors = []

    step_size = options.get('step_size')
    if step_size is None:
        errors.append("step_size required")
    elif not step_size >= 0:
        errors.append(f"step_size must be >= 0, got {step_size}")

    _raise_if_errors("RWM", errors)


def diagnose_chain(trace, diagnostics: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Analyzes a sampled chain to identify common issues.

    Args:
        trace: ChainTrace returned by sample_chain
        diagnostics: Existing diagnostics dict to extend

    Returns:
        diagnostics: Dictionary with issues, warnings, and info
    """
    diagnostics = (diagnostics or {}) | {
        'issues': [],
        'warnings': [],
        'info': []
    }
    positions = np.asarray(trace.positions)
    n_draws = positions.shape[0]

    if not np.all(np.isfinite(positions)):
        diagnostics['issues'].append(
            "Chain contains NaN or Inf positions - sampler became unstable"
        )

    if n_draws > 1 and np.all(np.var(positions, axis=0) < 1e-10):
        diagnostics['warnings'].append("Chain appears stuck (near-zero variance)")

    if trace.is_divergent is not None:
        n_divergent = int(np.sum(trace.is_divergent))
        if n_divergent > 0:
            diagnostics['warnings'].append(
                f"{n_divergent} of {n_draws} transitions were divergent - consider a smaller step_size"
            )

    if n_draws > 0:
        rate = float(np.mean(trace.is_accepted))
        if rate < 0.10:
            diagnostics['warnings'].append(f"Acceptance rate is low ({rate:.1%})")
        diagnostics['info'].append(f"Acceptance rate: {rate:.1%}")

    diagnostics['info'].append(f"Total draws: {n_draws}")
    diagnostics['info'].append(f"Position shape: {positions.shape[1:]}")

    return diagnostics


def print_diagnostics(diagnostics: Dict[str, Any]) -> None:
    """Pretty-print diagnostics from diagnose_chain."""
    if diagnostics['issues']:
        logger.error("\n[ERROR] ISSUES:")
        for issue in diagnostics['issues']:
            logger.error(f"  - {issue}")

    if diagnostics['warnings']:
        logger.warning("\n[WARN] WARNINGS:")
        for warning in diagnostics['warnings']:
            logger.warning(f"  - {warning}")

    if diagnostics['info']:
        logger.info("\n[INFO] INFO:")
        for info in diagnostics['info']:
            logger.info(f"  - {info}")

    if not diagnostics['issues'] and not diagnostics['warnings']:
        logger.info("\n[OK] No issues detected")
