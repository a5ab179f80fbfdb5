"""
Visualization utilities for NCA projections.
"""

import numpy as np
import matplotlib.pyplot as plt

from .distance import project
from .utils import encode_labels


def plot_projection(X, y, A, title=None, ax=None, cmap='viridis',
                    point_size=10, alpha=0.7, colorbar=True):
    """
    Scatter the points after projecting them with ``A``.

    Only the first two projected dimensions are drawn; a one-dimensional
    projection is drawn along the x axis.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
        Points.
    y : sequence of length n_samples
        Class labels used for coloring.
    A : ndarray of shape (P, n_features)
        Projection.
    title : str or None
        Plot title.
    ax : matplotlib.axes.Axes or None
        Axes to plot on. Creates new figure if None.
    cmap : str, default='viridis'
        Colormap name.
    point_size : float, default=10
        Size of scatter points.
    alpha : float, default=0.7
        Point transparency.
    colorbar : bool, default=True
        Whether to show colorbar.

    Returns
    -------
    ax : matplotlib.axes.Axes
        The axes with the plot.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))

    Z = project(X, A)
    if Z.shape[1] == 1:
        Z = np.column_stack([Z[:, 0], np.zeros(len(Z))])

    codes, classes = encode_labels(y)

    scatter = ax.scatter(Z[:, 0], Z[:, 1], c=codes, cmap=cmap,
                         s=point_size, alpha=alpha)

    if colorbar and len(classes) > 1:
        plt.colorbar(scatter, ax=ax)

    ax.set_xlabel('Component 1')
    ax.set_ylabel('Component 2' if np.shape(A)[0] > 1 else '')

    if title:
        ax.set_title(title)

    return ax


def plot_loss_history(loss_history, n_samples=None, title='NCA Objective', ax=None):
    """
    Plot the objective per optimizer iteration, e.g. ``NCA.loss_history_``.

    Parameters
    ----------
    loss_history : list
        Negated standard-scaled objective values.
    n_samples : int or None
        When given, the curve is drawn as the soft neighbor accuracy
        ``-objective / n_samples`` in [0, 1] instead of the raw objective.
    title : str, default='NCA Objective'
        Plot title.
    ax : matplotlib.axes.Axes or None
        Axes to plot on.

    Returns
    -------
    ax : matplotlib.axes.Axes
        The axes with the plot.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 4))

    values = np.asarray(loss_history, dtype=np.float64)
    if n_samples is not None:
        values = -values / n_samples
        ax.set_ylabel('Soft neighbor accuracy')
        ax.set_ylim(0.0, 1.05)
    else:
        ax.set_ylabel('Objective')

    ax.plot(np.arange(1, len(values) + 1), values, linewidth=1.5)
    if len(values):
        ax.axhline(values[-1], color='gray', linestyle='--', alpha=0.5)
        ax.annotate(f"{values[-1]:.4f}", xy=(len(values), values[-1]),
                    xytext=(0, 5), textcoords='offset points', ha='right')

    ax.set_xlabel('Iteration')
    ax.set_title(title)
    ax.grid(True, alpha=0.3)

    return ax
