"""
Objective scalings for the NCA loss.
"""

from enum import Enum

import numpy as np


class ObjectiveScaling(Enum):
    """
    Transform applied to (same-class mass, total mass) before summation.

    STANDARD sums the expected leave-one-out accuracy ``same / total``.
    LOG sums the log-likelihood ``log(same) - log(total)``.
    """

    STANDARD = "standard"
    LOG = "log"

    @classmethod
    def from_value(cls, value):
        """Coerce a member or its (case-insensitive) name to a member."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise ValueError(f"Unknown scaling: {value!r}")

    def combine(self, same, total):
        """Per-reference contribution to the (un-negated) objective."""
        if self is ObjectiveScaling.STANDARD:
            return same / total
        return np.log(same) - np.log(total)

    def combine_logs(self, log_same, log_total):
        """As :meth:`combine`, from ``log(same)`` and ``log(total)``."""
        if self is ObjectiveScaling.STANDARD:
            return np.exp(log_same - log_total)
        return log_same - log_total

    def combine_gradient(self, sum_all, sum_same, same, total):
        """
        Per-reference gradient contribution in D x D metric space.

        Parameters
        ----------
        sum_all : ndarray of shape (D, D)
            Weighted outer products over all neighbors.
        sum_same : ndarray of shape (D, D)
            Weighted outer products over same-class neighbors.
        same, total : float
            Same-class and total softmax mass. Each ratio in the rule is
            invariant to rescaling its numerator and denominator together,
            so ``sum_same, same`` may use a different shift than
            ``sum_all, total`` under LOG scaling.
        """
        if self is ObjectiveScaling.STANDARD:
            return (same / total ** 2) * sum_all - sum_same / total
        return sum_all / total - sum_same / same
