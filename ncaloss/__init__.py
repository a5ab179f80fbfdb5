from .core import (
    NCA,
    objective,
    objective_repeats,
    objective_and_gradient,
    objective_and_gradient_repeats,
    value_and_gradient
)
from .scaling import ObjectiveScaling
from .distance import (
    metric_from_projection,
    sq_mahalanobis,
    project,
    projected_sq_distances
)
from .softmax import (
    neighbor_weights,
    cell_weights,
    neighbor_masses,
    cell_masses
)
from .cells import CellSet, build_cells
from .utils import (
    ShapeMismatchError,
    DegenerateNeighborhoodError,
    ZeroSameClassMassError,
    numerical_gradient,
    points_from_columns
)
from .metrics import (
    knn_accuracy,
    soft_neighbor_accuracy,
    evaluate_projection
)
from .preprocessing import NCAPreprocessor, initial_projection
from .visualization import plot_projection, plot_loss_history

__version__ = "0.1.0"
__all__ = [
    # Core
    "NCA",
    "objective",
    "objective_repeats",
    "objective_and_gradient",
    "objective_and_gradient_repeats",
    "value_and_gradient",
    "ObjectiveScaling",
    # Distances and weights
    "metric_from_projection",
    "sq_mahalanobis",
    "project",
    "projected_sq_distances",
    "neighbor_weights",
    "cell_weights",
    "neighbor_masses",
    "cell_masses",
    # Repeat compression
    "CellSet",
    "build_cells",
    # Utils
    "ShapeMismatchError",
    "DegenerateNeighborhoodError",
    "ZeroSameClassMassError",
    "numerical_gradient",
    "points_from_columns",
    # Metrics
    "knn_accuracy",
    "soft_neighbor_accuracy",
    "evaluate_projection",
    # Preprocessing
    "NCAPreprocessor",
    "initial_projection",
    # Visualization
    "plot_projection",
    "plot_loss_history"
]
