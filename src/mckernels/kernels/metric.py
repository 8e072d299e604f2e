"""
Gaussian-Euclidean Metric

Kinetic energy and momentum distribution for a diagonal mass matrix M:

    K(p) = 0.5 * sum_i p_i^2 * Minv_i
    grad K(p) = Minv * p
    p ~ N(0, M), drawn as z * sqrt(M) with z ~ N(0, I)

The metric is parameterised by the inverse mass matrix Minv (a vector),
which it owns for its whole lifetime.
"""

from ..runtime import Array, grad, ops, prng


class GaussianEuclidean:
    """
    Diagonal Euclidean metric.

    Args:
        inverse_mass_matrix: 1-D Array holding the diagonal of M^-1.
            Ownership is transferred to the metric.
    """

    def __init__(self, inverse_mass_matrix: Array):
        self._inverse_mass_matrix = inverse_mass_matrix
        self._mass_matrix_sqrt = ops.sqrt(ops.reciprocal(inverse_mass_matrix.ref))
        # Differentiated once here, reused for every leapfrog step
        self.kinetic_energy_grad = grad(self.kinetic_energy)

    def kinetic_energy(self, momentum: Array) -> Array:
        """K(p) = 0.5 * p^T M^-1 p (consumes momentum)."""
        return (momentum.ref * momentum * self._inverse_mass_matrix.ref).sum() * 0.5

    def sample_momentum(self, key: Array, position: Array) -> Array:
        """
        Draw p ~ N(0, M) shaped like position.

        Consumes both key and position (only the shape of position is used).
        """
        shape = position.shape
        position.dispose()
        z = prng.normal(key, shape)
        return z * self._mass_matrix_sqrt.ref

    def dispose(self) -> None:
        """Release the metric's own handles."""
        self._inverse_mass_matrix.dispose()
        self._mass_matrix_sqrt.dispose()
