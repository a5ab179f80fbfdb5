"""
Softmax neighbor model: stabilized exp(-distance) weights and class masses.

Raw points and compressed cells share one representation: a multiplicity
per candidate, which is 1 for every other point in raw mode, the cell count
in compressed mode, and one unit less for the reference itself.
"""

import numpy as np
from scipy.special import logsumexp


def neighbor_multiplicity(n_samples, ref):
    """Multiplicity of each raw point as a neighbor of point ``ref``."""
    multiplicity = np.ones(n_samples)
    multiplicity[ref] = 0.0
    return multiplicity


def cell_multiplicity(counts, ref):
    """Multiplicity of each cell as a neighbor of an element of cell ``ref``."""
    multiplicity = counts.astype(np.float64)
    multiplicity[ref] -= 1.0
    return multiplicity


def stabilized_weights(distances, multiplicity, mask=None):
    """
    ``exp(-distance) * multiplicity`` shifted by the minimum over candidates.

    Candidates are the entries with positive multiplicity, restricted to
    ``mask`` when given. Other entries get weight 0 and are never
    exponentiated, since their shifted distance can be negative.

    Parameters
    ----------
    distances : ndarray of shape (n,)
        Squared distances from the reference.
    multiplicity : ndarray of shape (n,)
        Neighbor multiplicities.
    mask : ndarray of bool or None
        Further restriction of the candidates, e.g. to the reference's class.

    Returns
    -------
    weights : ndarray of shape (n,)
    """
    candidates = multiplicity > 0
    if mask is not None:
        candidates &= mask

    weights = np.zeros(len(distances))
    if not candidates.any():
        return weights
    shifted = distances[candidates] - np.min(distances[candidates])
    weights[candidates] = np.exp(-shifted) * multiplicity[candidates]
    return weights


def neighbor_weights(distances, ref):
    """
    Unnormalized softmax weights of every point as a neighbor of ``ref``.

    The reference point never counts as its own neighbor: its weight is 0
    and its distance is left out of the stabilizing minimum.

    Parameters
    ----------
    distances : ndarray of shape (n_samples,)
        Squared distances from the reference to every point.
    ref : int
        Index of the reference point.

    Returns
    -------
    weights : ndarray of shape (n_samples,)
    """
    return stabilized_weights(distances, neighbor_multiplicity(len(distances), ref))


def cell_weights(distances, counts, ref):
    """
    Softmax weights of every cell as a neighbor of an element of cell ``ref``.

    Each cell weighs ``exp(-distance) * count``; the reference cell loses
    exactly one unit of multiplicity for the element itself.

    Parameters
    ----------
    distances : ndarray of shape (n_cells,)
        Squared distances from the reference cell to every cell.
    counts : ndarray of shape (n_cells,)
        Cell multiplicities.
    ref : int
        Index of the reference cell.

    Returns
    -------
    weights : ndarray of shape (n_cells,)
    """
    return stabilized_weights(distances, cell_multiplicity(counts, ref))


def class_masses(weights, codes, ref_code):
    """Split total softmax mass into (same-class mass, total mass)."""
    total = weights.sum()
    same = weights[codes == ref_code].sum()
    return same, total


def log_class_masses(distances, multiplicity, same_class):
    """
    ``log(same)`` and ``log(total)`` without forming the masses.

    Both sums run in log space, so a same-class neighbor far behind the
    nearest neighbor still has a finite log mass.

    Returns
    -------
    log_same : float
        ``-inf`` when no same-class candidate exists.
    log_total : float
    """
    candidates = multiplicity > 0
    log_total = logsumexp(-distances[candidates], b=multiplicity[candidates])

    same = candidates & same_class
    if not same.any():
        return -np.inf, log_total
    log_same = logsumexp(-distances[same], b=multiplicity[same])
    return log_same, log_total


def neighbor_masses(distances, codes, ref):
    """
    Same-class and total mass around point ``ref`` (raw mode).

    Returns
    -------
    same : float
    total : float
    """
    return class_masses(neighbor_weights(distances, ref), codes, codes[ref])


def cell_masses(distances, codes, counts, ref):
    """
    Same-class and total mass around cell ``ref`` (compressed mode).

    Returns
    -------
    same : float
    total : float
    """
    return class_masses(cell_weights(distances, counts, ref), codes, codes[ref])
