"""
Utility functions for ncaloss: input validation, errors and gradient checks.
"""

import numpy as np


class ShapeMismatchError(ValueError):
    """Inputs whose lengths or dimensions do not agree."""


class DegenerateNeighborhoodError(ValueError):
    """A reference element has no neighbor, so its total mass is zero."""


class ZeroSameClassMassError(ValueError):
    """Log scaling with a reference element that has no same-class mass."""


def encode_labels(y):
    """
    Map opaque labels to integer codes by equality.

    Codes are assigned in order of first appearance. Hashable labels are
    looked up in a dict; unhashable ones (lists, say) fall back to an
    equality scan over the classes seen so far.

    Parameters
    ----------
    y : sequence
        Class labels.

    Returns
    -------
    codes : ndarray of shape (n_samples,)
        Integer code per sample.
    classes : list
        The distinct labels, indexed by code.
    """
    lookup = {}
    classes = []
    codes = np.empty(len(y), dtype=np.int64)
    for i, label in enumerate(y):
        try:
            code = lookup.get(label)
            hashable = True
        except TypeError:
            code = next((k for k, c in enumerate(classes) if c == label), None)
            hashable = False
        if code is None:
            code = len(classes)
            if hashable:
                lookup[label] = code
            classes.append(label)
        codes[i] = code
    return codes, classes


def as_projection(A, n_features, dims=None):
    """
    Return a float (P, D) copy of the projection matrix.

    Parameters
    ----------
    A : array-like
        Either a (P, D) matrix, or any array holding P * D values
        in row-major order when ``dims`` is given.
    n_features : int
        Point dimensionality D.
    dims : int or None
        Output dimensionality P. Required when ``A`` is not 2-D.

    Returns
    -------
    A : ndarray of shape (P, D)
    """
    A = np.array(A, dtype=np.float64)

    if dims is None:
        if A.ndim != 2:
            raise ShapeMismatchError(
                f"A has {A.ndim} dimension(s); pass dims=P to reshape it."
            )
        if A.shape[1] != n_features:
            raise ShapeMismatchError(
                f"A has {A.shape[1]} columns but points have {n_features} features."
            )
        return A

    dims = int(dims)
    if dims < 1 or A.size != dims * n_features:
        raise ShapeMismatchError(
            f"A has {A.size} entries, expected dims * n_features = "
            f"{dims} * {n_features}."
        )
    return A.reshape(dims, n_features)


def check_inputs(A, X, y, dims=None):
    """
    Validate and normalize the arguments of an objective evaluation.

    Returns
    -------
    A : ndarray of shape (P, D)
        Float copy of the projection.
    X : ndarray of shape (n_samples, D)
        Points as floats.
    codes : ndarray of shape (n_samples,)
        Integer label codes.
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
    if len(X) < 2:
        raise DegenerateNeighborhoodError(
            "At least two samples are needed: every point must have a neighbor."
        )

    A = as_projection(A, X.shape[1], dims)
    codes, _ = encode_labels(y)
    return A, X, codes


def check_same_class_support(codes, counts=None):
    """
    Reject datasets where some sample has no same-class neighbor.

    Parameters
    ----------
    codes : ndarray of int
        Label code per sample (or per cell).
    counts : ndarray of int or None
        Multiplicity per entry; each entry counts once when None.
    """
    population = np.bincount(codes, weights=counts)
    if np.any(population < 2):
        lonely = np.flatnonzero(population < 2)
        raise ZeroSameClassMassError(
            f"Log scaling needs every class to occur at least twice; "
            f"{len(lonely)} class(es) occur only once."
        )


def check_gradient_buffer(gradient_out, size):
    """Reject a gradient buffer that cannot hold ``size`` entries."""
    if gradient_out.size != size:
        raise ShapeMismatchError(
            f"Gradient buffer has {gradient_out.size} entries, expected {size}."
        )


def write_gradient(gradient_out, G):
    """Overwrite a caller-owned buffer of shape (P, D) or P * D entries."""
    check_gradient_buffer(gradient_out, G.size)
    gradient_out[...] = G.reshape(gradient_out.shape)


def numerical_gradient(fun, A, eps=1e-6):
    """
    Centered finite-difference gradient of a scalar function.

    Parameters
    ----------
    fun : callable
        Function of an array shaped like ``A`` returning a float.
    A : ndarray
        Point at which to differentiate.
    eps : float, default=1e-6
        Step size.

    Returns
    -------
    grad : ndarray
        Array shaped like ``A``.
    """
    A = np.array(A, dtype=np.float64)
    grad = np.zeros_like(A)
    flat = A.reshape(-1)
    grad_flat = grad.reshape(-1)

    for k in range(flat.size):
        orig = flat[k]
        flat[k] = orig + eps
        f_plus = fun(A)
        flat[k] = orig - eps
        f_minus = fun(A)
        flat[k] = orig
        grad_flat[k] = (f_plus - f_minus) / (2 * eps)

    return grad


def points_from_columns(X, n_features):
    """
    Reinterpret a column-major (n_features, n_samples) matrix as points.

    Parameters
    ----------
    X : ndarray of shape (n_features, n_samples)
        One point per column.
    n_features : int
        Expected number of rows.

    Returns
    -------
    points : ndarray of shape (n_samples, n_features)
        Contiguous copy with one point per row.
    """
    X = np.asarray(X)
    if X.ndim != 2 or X.shape[0] != n_features:
        raise ShapeMismatchError(
            f"Expected {n_features} rows, got shape {X.shape}."
        )
    if not np.issubdtype(X.dtype, np.number):
        raise ValueError(f"Points must be numeric, got dtype {X.dtype}.")
    return np.ascontiguousarray(X.T, dtype=np.float64)
