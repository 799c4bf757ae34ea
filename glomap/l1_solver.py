"""ADMM solver for min ||A x - b||_1."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import splu

logger = logging.getLogger(__name__)


class L1SolverError(RuntimeError):
    """Raised when the normal equations cannot be factorized."""


@dataclass
class L1SolverOptions:
    max_num_iterations: int = 1000
    # Augmented Lagrangian parameter.
    rho: float = 1.0
    # Over-relaxation parameter (typically between 1.0 and 1.8).
    alpha: float = 1.0
    absolute_tolerance: float = 1e-4
    relative_tolerance: float = 1e-2


def _shrinkage(vec: np.ndarray, kappa: float) -> np.ndarray:
    return np.maximum(0.0, vec - kappa) - np.maximum(0.0, -vec - kappa)


class L1Solver:
    """Least absolute deviations solver for a fixed matrix A."""

    def __init__(self, options: L1SolverOptions, matrix) -> None:
        self.options = options
        self._a = sp.csr_matrix(matrix, dtype=float)
        self._at = self._a.T.tocsr()
        self._factor = None
        try:
            self._factor = splu(sp.csc_matrix(self._at @ self._a))
        except RuntimeError as exc:
            logger.debug("Factorization of A^T A failed: %s", exc)

    def solve(self, rhs) -> np.ndarray:
        """Return x minimizing ||A x - rhs||_1."""
        if self._factor is None:
            logger.error(
                "L1 Minimization failed. Could not solve the sparse linear "
                "system with Cholesky Decomposition"
            )
            raise L1SolverError("could not factorize the normal equations")

        opts = self.options
        a, at = self._a, self._at
        rows, cols = a.shape
        rhs = np.asarray(rhs, dtype=float).reshape(-1)
        if rhs.shape[0] != rows:
            raise ValueError(f"rhs has {rhs.shape[0]} entries, expected {rows}")

        x = np.zeros(cols)
        z = np.zeros(rows)
        u = np.zeros(rows)
        rhs_norm = np.linalg.norm(rhs)
        primal_abs_eps = math.sqrt(rows) * opts.absolute_tolerance
        dual_abs_eps = math.sqrt(cols) * opts.absolute_tolerance

        for _ in range(opts.max_num_iterations):
            x = self._factor.solve(at @ (rhs + z - u))
            if not np.all(np.isfinite(x)):
                logger.error(
                    "L1 Minimization failed. Could not solve the sparse linear "
                    "system with Cholesky Decomposition"
                )
                raise L1SolverError("linear solve produced non-finite values")

            a_times_x = a @ x
            ax_hat = opts.alpha * a_times_x + (1.0 - opts.alpha) * (z + rhs)

            z_old = z
            z = _shrinkage(ax_hat - rhs + u, 1.0 / opts.rho)
            u = u + ax_hat - z - rhs

            r_norm = np.linalg.norm(a_times_x - z - rhs)
            s_norm = np.linalg.norm(-opts.rho * (at @ (z - z_old)))
            max_norm = max(np.linalg.norm(a_times_x), np.linalg.norm(z), rhs_norm)
            primal_eps = primal_abs_eps + opts.relative_tolerance * max_norm
            dual_eps = dual_abs_eps + opts.relative_tolerance * np.linalg.norm(
                opts.rho * (at @ u)
            )
            if r_norm < primal_eps and s_norm < dual_eps:
                break
        return x