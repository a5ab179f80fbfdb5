"""
Evaluation metrics for learned projections.
"""

import numpy as np
from sklearn.neighbors import NearestNeighbors

from .core import objective
from .distance import project
from .utils import ShapeMismatchError, encode_labels


def knn_accuracy(X, y, A=None, k=3):
    """
    Leave-one-out k-NN classification accuracy in the projected space.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
        Points.
    y : sequence of length n_samples
        Class labels.
    A : ndarray of shape (P, n_features) or None
        Projection; the raw feature space is used when None.
    k : int, default=3
        Number of neighbors voting for each point.

    Returns
    -------
    accuracy : float
        Fraction of points whose majority neighbor label matches their own.
    """
    X = np.asarray(X, dtype=np.float64)
    if len(X) != len(y):
        raise ShapeMismatchError(
            f"Points and labels should be of the same length ({len(X)} != {len(y)})."
        )
    n_samples = X.shape[0]
    k = min(k, n_samples - 1)
    if k < 1:
        raise ValueError("At least two samples are needed for k-NN accuracy.")

    Z = X if A is None else project(X, A)
    codes, classes = encode_labels(y)

    # Without a query argument each point is excluded from its own neighbors
    nn = NearestNeighbors(n_neighbors=k).fit(Z)
    _, idx = nn.kneighbors()

    hits = 0
    for i in range(n_samples):
        votes = np.bincount(codes[idx[i]], minlength=len(classes))
        hits += int(np.argmax(votes) == codes[i])

    return hits / n_samples


def soft_neighbor_accuracy(X, y, A, dims=None):
    """
    Expected leave-one-out accuracy of the stochastic neighbor classifier.

    This is the standard-scaled NCA objective, un-negated and averaged
    over the samples, so it lies in [0, 1].
    """
    return -objective(A, X, y, scaling='standard', dims=dims) / len(y)


def evaluate_projection(X, y, A, k=3):
    """
    Compute all metrics for a projection.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
        Points.
    y : sequence
        Class labels.
    A : ndarray of shape (P, n_features)
        Projection.
    k : int, default=3
        Number of neighbors for the k-NN accuracy.

    Returns
    -------
    metrics : dict
        Dictionary with all metric values.
    """
    return {
        'knn_accuracy': knn_accuracy(X, y, A, k),
        'soft_neighbor_accuracy': soft_neighbor_accuracy(X, y, A)
    }
