"""
Repeat compression: group identical (point, label) rows into weighted cells.
"""

import numpy as np

from .utils import ShapeMismatchError, encode_labels


class CellSet:
    """
    Multiset of unique (point, label) pairs.

    Cells are stored in order of first occurrence, and ``points``,
    ``codes`` and ``counts`` share that single order.

    Attributes
    ----------
    points : ndarray of shape (n_cells, n_features)
        Unique points (a point appears once per distinct label it carries).
    codes : ndarray of shape (n_cells,)
        Integer label code of each cell.
    counts : ndarray of shape (n_cells,)
        Multiplicity of each cell, all >= 1.
    classes : list
        Distinct labels, indexed by code.
    """

    def __init__(self, points, codes, counts, classes):
        self.points = points
        self.codes = codes
        self.counts = counts
        self.classes = classes

    @property
    def n_cells(self):
        return len(self.counts)

    @property
    def n_samples(self):
        return int(self.counts.sum())

    @property
    def compression_ratio(self):
        """Number of samples per cell; 1.0 when every row is distinct."""
        return self.n_samples / self.n_cells

    @property
    def labels(self):
        return [self.classes[c] for c in self.codes]

    def __len__(self):
        return self.n_cells

    def __repr__(self):
        return (f"CellSet(n_cells={self.n_cells}, n_samples={self.n_samples}, "
                f"n_features={self.points.shape[1]})")


def build_cells(X, y):
    """
    Group a dataset by exact (point, label) equality.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
        Points.
    y : sequence of length n_samples
        Labels, compared by equality.

    Returns
    -------
    cells : CellSet
    """
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ShapeMismatchError(
            f"Points must be a 2-D array of shape (n_samples, n_features), got {X.ndim}-D."
        )
    if len(X) != len(y):
        raise ShapeMismatchError(
            f"Points and labels should be of the same length ({len(X)} != {len(y)})."
        )

    codes, classes = encode_labels(y)

    index = {}
    first_rows = []
    counts = []
    for row, (point, code) in enumerate(zip(X, codes)):
        key = (tuple(point.tolist()), code)
        k = index.get(key)
        if k is None:
            index[key] = len(counts)
            first_rows.append(row)
            counts.append(1)
        else:
            counts[k] += 1

    first_rows = np.asarray(first_rows, dtype=np.int64)
    return CellSet(
        points=X[first_rows],
        codes=codes[first_rows],
        counts=np.asarray(counts, dtype=np.int64),
        classes=classes,
    )
