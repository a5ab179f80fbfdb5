"""
Squared Mahalanobis distances under a metric M = A^T A.
"""

import numpy as np


def metric_from_projection(A):
    """Return the D x D metric ``A^T A`` induced by a (P, D) projection."""
    A = np.asarray(A, dtype=np.float64)
    return A.T @ A


def sq_mahalanobis(M, u, v):
    """
    Squared Mahalanobis distance ``(u - v)^T M (u - v)``.

    Parameters
    ----------
    M : ndarray of shape (D, D)
        Positive semi-definite metric.
    u, v : ndarray of shape (D,)
        Points.

    Returns
    -------
    d : float
        Non-negative distance.
    """
    diff = np.asarray(u, dtype=np.float64) - np.asarray(v, dtype=np.float64)
    # Rounding can push a PSD quadratic form slightly below zero
    return max(float(diff @ M @ diff), 0.0)


def project(X, A):
    """Map points (n_samples, D) into the (n_samples, P) projected space."""
    return np.asarray(X, dtype=np.float64) @ np.asarray(A, dtype=np.float64).T


def projected_sq_distances(Z, ref):
    """
    Squared Euclidean distances from ``Z[ref]`` to every row of ``Z``.

    With ``Z = X A^T`` this equals the squared Mahalanobis distance under
    ``A^T A`` while projecting each point only once per evaluation.

    Parameters
    ----------
    Z : ndarray of shape (n, P)
        Projected points.
    ref : int
        Index of the reference row.

    Returns
    -------
    distances : ndarray of shape (n,)
    """
    diff = Z[ref] - Z
    return np.einsum('ij,ij->i', diff, diff)
