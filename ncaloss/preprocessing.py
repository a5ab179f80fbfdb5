"""
Data preparation for NCA: feature scaling and initial projections.
"""

import numpy as np
from sklearn.decomposition import PCA
from sklearn.preprocessing import MinMaxScaler, RobustScaler, StandardScaler
from sklearn.utils import check_random_state

from .utils import ShapeMismatchError

_SCALERS = {
    'standard': StandardScaler,
    'minmax': MinMaxScaler,
    'robust': RobustScaler,
}


class NCAPreprocessor:
    """
    Per-feature rescaling applied before distances are taken.

    The softmax weights decay as exp(-distance), so a feature measured in
    large units swamps the others and drives every neighbor but the
    nearest to zero weight. ``NCA(preprocess=...)`` fits one of these on
    the training points and applies it again in ``transform``, so the
    learned projection always acts on rescaled features.

    Parameters
    ----------
    method : {'standard', 'minmax', 'robust'} or None, default='standard'
        Scikit-learn scaler to use; None leaves the features unchanged.
    """

    def __init__(self, method='standard'):
        self.method = method
        self.scaler_ = None

    def fit(self, X, y=None):
        """Fit the scaler on training points; labels are ignored."""
        if self.method is not None and self.method not in _SCALERS:
            raise ValueError(f"Unknown preprocessing method: {self.method}")

        X = np.asarray(X, dtype=np.float64)
        self.scaler_ = None if self.method is None else _SCALERS[self.method]().fit(X)
        return self

    def transform(self, X):
        """Rescale points with the fitted scaler."""
        X = np.asarray(X, dtype=np.float64)
        return X if self.scaler_ is None else self.scaler_.transform(X)

    def fit_transform(self, X, y=None):
        return self.fit(X, y).transform(X)


def initial_projection(X, n_components=None, init='identity', random_state=None):
    """
    Starting projection for the optimizer.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
        Training points.
    n_components : int or None
        Output dimensionality P; defaults to n_features.
    init : str or ndarray, default='identity'
        'identity' (truncated identity), 'pca' (leading principal axes),
        'random' (standard normal entries), or an explicit (P, D) matrix.
    random_state : int or None
        Seed for 'random'.

    Returns
    -------
    A : ndarray of shape (P, n_features)
    """
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ShapeMismatchError(
            f"Points must be a 2-D array of shape (n_samples, n_features), got {X.ndim}-D."
        )
    n_features = X.shape[1]

    if not isinstance(init, str):
        A = np.array(init, dtype=np.float64)
        if A.ndim != 2 or A.shape[1] != n_features:
            raise ShapeMismatchError(
                f"Initial projection must have shape (P, {n_features}), got {A.shape}."
            )
        if n_components is not None and A.shape[0] != n_components:
            raise ShapeMismatchError(
                f"Initial projection has {A.shape[0]} rows, n_components is {n_components}."
            )
        return A

    P = n_features if n_components is None else int(n_components)
    if P < 1:
        raise ValueError(f"n_components must be positive, got {P}")

    if init == 'identity':
        return np.eye(P, n_features)
    elif init == 'pca':
        if P > min(X.shape):
            raise ValueError(
                f"PCA initialization needs n_components <= min(n_samples, n_features) "
                f"= {min(X.shape)}, got {P}"
            )
        return PCA(n_components=P).fit(X).components_
    elif init == 'random':
        rng = check_random_state(random_state)
        return rng.standard_normal((P, n_features))
    else:
        raise ValueError(f"Unknown init: {init}")
