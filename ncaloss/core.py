"""
Neighbourhood Components Analysis objective and gradient.

The objective is the negated expected number of points a soft nearest
neighbor classifier labels correctly under the metric M = A^T A, so that
an external optimizer can minimize it over the projection A. Each
evaluation is a pure function of (A, points, labels, scaling); nothing is
cached between calls because A changes on every optimizer iteration.
"""

import warnings

import numpy as np
from scipy.optimize import minimize
from sklearn.exceptions import ConvergenceWarning, NotFittedError

from .cells import build_cells
from .distance import project, projected_sq_distances
from .preprocessing import NCAPreprocessor, initial_projection
from .scaling import ObjectiveScaling
from .softmax import (
    cell_multiplicity,
    log_class_masses,
    neighbor_multiplicity,
    stabilized_weights,
)
from .utils import (
    ZeroSameClassMassError,
    check_gradient_buffer,
    check_inputs,
    check_same_class_support,
    write_gradient,
)


def _evaluate(A, points, codes, counts, scaling, want_value=True, want_gradient=True):
    """
    Shared engine for the raw (``counts is None``) and compressed modes.

    Parameters
    ----------
    A : ndarray of shape (P, D)
        Projection.
    points : ndarray of shape (n, D)
        Points, or unique cell points in compressed mode.
    codes : ndarray of shape (n,)
        Integer label codes.
    counts : ndarray of shape (n,) or None
        Cell multiplicities; None for raw points.
    scaling : ObjectiveScaling

    Returns
    -------
    value : float or None
        Negated objective, when ``want_value``.
    gradient : ndarray of shape (P, D) or None
        Gradient of ``value`` with respect to A, when ``want_gradient``.
    """
    Z = project(points, A)
    n_features = points.shape[1]

    value = 0.0
    G_metric = np.zeros((n_features, n_features)) if want_gradient else None

    for i in range(len(points)):
        distances = projected_sq_distances(Z, i)
        if counts is None:
            neighbors = neighbor_multiplicity(len(points), i)
            multiplicity = 1.0
        else:
            neighbors = cell_multiplicity(counts, i)
            multiplicity = float(counts[i])

        same_class = codes == codes[i]
        weights = stabilized_weights(distances, neighbors)

        if scaling is ObjectiveScaling.LOG:
            # Shifted by the nearest same-class neighbor, not the nearest neighbor
            same_weights = stabilized_weights(distances, neighbors, same_class)
            if not same_weights.any():
                raise ZeroSameClassMassError(
                    f"Element {i} has no same-class neighbor; "
                    f"log scaling is undefined."
                )
        else:
            same_weights = np.where(same_class, weights, 0.0)

        same = same_weights.sum()
        total = weights.sum()

        if want_value:
            if scaling is ObjectiveScaling.LOG:
                log_same, log_total = log_class_masses(distances, neighbors, same_class)
                value += multiplicity * scaling.combine_logs(log_same, log_total)
            else:
                value += multiplicity * scaling.combine(same, total)

        if want_gradient:
            diff = points[i] - points
            sum_all = (diff * weights[:, np.newaxis]).T @ diff
            sum_same = (diff * same_weights[:, np.newaxis]).T @ diff
            G_metric += multiplicity * scaling.combine_gradient(sum_all, sum_same, same, total)

    value = -value if want_value else None
    gradient = -2.0 * A @ G_metric if want_gradient else None
    return value, gradient


def _prepare(A, X, y, scaling, dims, repeats):
    """Validate inputs and return the engine arguments for either mode."""
    scaling = ObjectiveScaling.from_value(scaling)
    A, X, codes = check_inputs(A, X, y, dims)

    if repeats:
        cells = build_cells(X, y)
        points, codes, counts = cells.points, cells.codes, cells.counts
    else:
        points, counts = X, None

    if scaling is ObjectiveScaling.LOG:
        check_same_class_support(codes, counts)

    return A, points, codes, counts, scaling


def _objective_and_gradient(A, X, y, scaling, want_value, want_gradient,
                            gradient_out, dims, repeats):
    A, points, codes, counts, scaling = _prepare(A, X, y, scaling, dims, repeats)
    compute_gradient = want_gradient and gradient_out is not None

    if compute_gradient:
        check_gradient_buffer(gradient_out, A.size)

    value, gradient = _evaluate(A, points, codes, counts, scaling,
                                want_value=want_value,
                                want_gradient=compute_gradient)
    if compute_gradient:
        write_gradient(gradient_out, gradient)
    return value


def objective(A, X, y, scaling='standard', dims=None):
    """
    NCA objective over raw points, in O(n^2) distance evaluations.

    Parameters
    ----------
    A : array-like of shape (P, D)
        Projection matrix. May be flat when ``dims`` is given.
    X : ndarray of shape (n_samples, D)
        Points, one per row.
    y : sequence of length n_samples
        Class labels, compared by equality.
    scaling : {'standard', 'log'} or ObjectiveScaling, default='standard'
        'standard' sums same/total per point, 'log' sums log(same/total).
    dims : int or None
        Output dimensionality P, required when ``A`` is not 2-D.

    Returns
    -------
    value : float
        The negated objective, to be minimized.
    """
    A, points, codes, counts, scaling = _prepare(A, X, y, scaling, dims, repeats=False)
    value, _ = _evaluate(A, points, codes, counts, scaling, want_gradient=False)
    return value


def objective_repeats(A, X, y, scaling='standard', dims=None):
    """
    NCA objective with identical (point, label) rows compressed into cells.

    Equal to :func:`objective` up to rounding; the cost is quadratic in the
    number of distinct cells rather than in the number of samples.

    Parameters
    ----------
    A, X, y, scaling, dims
        As in :func:`objective`.

    Returns
    -------
    value : float
    """
    A, points, codes, counts, scaling = _prepare(A, X, y, scaling, dims, repeats=True)
    value, _ = _evaluate(A, points, codes, counts, scaling, want_gradient=False)
    return value


def objective_and_gradient(A, X, y, scaling='standard', want_value=True,
                           want_gradient=True, gradient_out=None, dims=None):
    """
    Objective and gradient in one pass over the data.

    Parameters
    ----------
    A, X, y, scaling, dims
        As in :func:`objective`.
    want_value : bool, default=True
        Whether to compute and return the objective.
    want_gradient : bool, default=True
        Whether to compute the gradient into ``gradient_out``.
    gradient_out : ndarray or None
        Caller-owned buffer of shape (P, D) or with P * D entries. It is
        overwritten, never read, and only when ``want_gradient`` is set.

    Returns
    -------
    value : float or None
        The negated objective if ``want_value``, else None.
    """
    return _objective_and_gradient(A, X, y, scaling, want_value, want_gradient,
                                   gradient_out, dims, repeats=False)


def objective_and_gradient_repeats(A, X, y, scaling='standard', want_value=True,
                                   want_gradient=True, gradient_out=None, dims=None):
    """Compressed-mode counterpart of :func:`objective_and_gradient`."""
    return _objective_and_gradient(A, X, y, scaling, want_value, want_gradient,
                                   gradient_out, dims, repeats=True)


def value_and_gradient(A, X, y, scaling='standard', dims=None, repeats=False):
    """
    Return ``(value, gradient)`` with the gradient shaped like ``A``.

    This is the pair ``scipy.optimize.minimize(..., jac=True)`` expects
    from its objective function.
    """
    shape = np.shape(A)
    gradient = np.empty(shape, dtype=np.float64)
    if repeats:
        value = objective_and_gradient_repeats(A, X, y, scaling, gradient_out=gradient, dims=dims)
    else:
        value = objective_and_gradient(A, X, y, scaling, gradient_out=gradient, dims=dims)
    return value, gradient


class NCA:
    """
    Learn a linear projection by minimizing the NCA objective.

    The objective and its gradient are handed to scipy's L-BFGS-B.

    Parameters
    ----------
    n_components : int or None, default=None
        Output dimensionality P. Defaults to the number of features.
    scaling : {'standard', 'log'}, default='standard'
        Objective scaling.
    repeats : bool or 'auto', default='auto'
        Whether to compress identical (point, label) rows into cells.
        'auto' compresses only when the data contain repeats.
    init : {'identity', 'pca', 'random'} or ndarray, default='identity'
        Initial projection.
    preprocess : {'standard', 'minmax', 'robust'} or None, default=None
        Feature rescaling fitted in `fit` and reapplied in `transform`;
        ``components_`` then acts on rescaled features.
    max_iter : int, default=100
        Maximum number of optimizer iterations.
    tol : float, default=1e-5
        Projected gradient tolerance passed to the optimizer.
    random_state : int or None, default=None
        Seed for the 'random' initialization.
    verbose : bool, default=False
        Whether to print optimization progress.
    """

    def __init__(
        self,
        n_components=None,
        scaling='standard',
        repeats='auto',
        init='identity',
        preprocess=None,
        max_iter=100,
        tol=1e-5,
        random_state=None,
        verbose=False
    ):
        self.n_components = n_components
        self.scaling = scaling
        self.repeats = repeats
        self.init = init
        self.preprocess = preprocess
        self.max_iter = max_iter
        self.tol = tol
        self.random_state = random_state
        self.verbose = verbose

        self.components_ = None
        self.objective_ = None
        self.n_iter_ = 0
        self.cells_ = None
        self.preprocessor_ = None
        self.loss_history_ = []

    def fit(self, X, y):
        """
        Fit the projection.

        Parameters
        ----------
        X : ndarray of shape (n_samples, n_features)
            Training points.
        y : sequence of length n_samples
            Class labels.

        Returns
        -------
        self : NCA
        """
        X = np.asarray(X, dtype=np.float64)
        scaling = ObjectiveScaling.from_value(self.scaling)
        if self.repeats not in (True, False, 'auto'):
            raise ValueError(f"Unknown repeats option: {self.repeats!r}")

        self.preprocessor_ = NCAPreprocessor(self.preprocess).fit(X)
        X = self.preprocessor_.transform(X)

        A0 = initial_projection(X, self.n_components, self.init, self.random_state)
        A0, X, codes = check_inputs(A0, X, y)
        n_components, n_features = A0.shape

        cells = build_cells(X, y)
        use_cells = self.repeats is True or (
            self.repeats == 'auto' and cells.n_cells < len(X)
        )
        if use_cells:
            points, codes, counts = cells.points, cells.codes, cells.counts
        else:
            points, counts = X, None

        if scaling is ObjectiveScaling.LOG:
            check_same_class_support(codes, counts)

        if self.verbose:
            mode = f"{cells.n_cells} cells" if use_cells else "raw points"
            print(f"NCA: {len(X)} samples, {n_features} -> {n_components} dims, "
                  f"{scaling.value} scaling, {mode}")

        self.loss_history_ = []

        def fun(a):
            A = a.reshape(n_components, n_features)
            value, gradient = _evaluate(A, points, codes, counts, scaling)
            return value, gradient.ravel()

        def callback(intermediate_result):
            self.loss_history_.append(float(intermediate_result.fun))
            it = len(self.loss_history_)
            if self.verbose and it % 10 == 0:
                print(f"Iter {it}: objective={intermediate_result.fun:.6f}")

        result = minimize(
            fun, A0.ravel(), method='L-BFGS-B', jac=True, callback=callback,
            options={'maxiter': self.max_iter, 'gtol': self.tol}
        )

        if not result.success:
            warnings.warn(
                f"NCA optimization did not converge after {result.nit} "
                f"iterations: {result.message}",
                ConvergenceWarning
            )

        self.components_ = result.x.reshape(n_components, n_features)
        self.objective_ = float(result.fun)
        self.n_iter_ = int(result.nit)
        self.cells_ = cells if use_cells else None

        if self.verbose:
            print(f"NCA: finished after {self.n_iter_} iterations, "
                  f"objective={self.objective_:.6f}")

        return self

    def transform(self, X):
        """Rescale points as in fit, then project them."""
        if self.components_ is None:
            raise NotFittedError("This NCA instance is not fitted yet; call fit first.")
        return project(self.preprocessor_.transform(X), self.components_)

    def fit_transform(self, X, y):
        """Fit the projection and return the projected training points."""
        return self.fit(X, y).transform(X)
