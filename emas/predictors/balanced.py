"""
Class-balancing wrapper for binary classifiers.

Amyloid and epitope datasets are usually dominated by negatives. The
wrapper trains its learner on all minority-class instances plus a seeded
random subset of the majority class, of size

    ceil(min(ratio * n_minority, n_majority))

Prediction is passed through to the learner unchanged.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from emas.core.errors import ConfigurationError, DegenerateTrainingError, NotTrainedError
from emas.core.models import Label
from emas.predictors.base import BaseLearner

logger = logging.getLogger(__name__)


@dataclass
class BalancedConfig:
    """
    Attributes:
        ratio: Majority instances kept per minority instance
        seed: Seed of the majority-class permutation
    """
    ratio: float = 1.0
    seed: int = 1

    def __post_init__(self):
        if self.ratio <= 0:
            raise ConfigurationError(f"ratio must be > 0, got {self.ratio}")


def balanced_indices(y: np.ndarray, ratio: float = 1.0, seed: int = 1) -> np.ndarray:
    """
    Row indices of the balanced training subset.

    Minority rows come first in their original order, followed by the
    sampled majority rows. Ties count class NEGATIVE as the minority.

    Args:
        y: Binary labels
        ratio: Majority instances kept per minority instance
        seed: Seed of the majority-class permutation

    Returns:
        1D integer array of selected row indices
    """
    y = np.asarray(y)
    positive = np.flatnonzero(y == Label.POSITIVE)
    negative = np.flatnonzero(y != Label.POSITIVE)

    if len(negative) > len(positive):
        minority, majority = positive, negative
    else:
        minority, majority = negative, positive

    n_keep = math.ceil(min(len(minority) * ratio, len(majority)))
    order = np.random.default_rng(seed).permutation(len(majority))
    sampled = majority[order[:n_keep]]

    logger.debug(
        f"Balanced subset: {len(minority)} minority + {n_keep} of {len(majority)} majority"
    )
    return np.concatenate([minority, sampled])


class BalancedClassifier:
    """
    Under-sampling meta classifier.

    Usage:
        >>> clf = BalancedClassifier(RandomForestClassifier(), BalancedConfig(ratio=2.0))
        >>> clf.fit(X, y).predict_proba(X_new)
    """

    def __init__(
        self,
        learner: Optional[BaseLearner] = None,
        config: Optional[BalancedConfig] = None,
    ):
        if learner is None:
            from sklearn.linear_model import LogisticRegression
            learner = LogisticRegression(max_iter=1000)
        if not isinstance(learner, BaseLearner):
            raise ConfigurationError(
                f"Learner {type(learner).__name__} does not provide fit/predict"
            )
        self.learner = learner
        self.config = config or BalancedConfig()
        self.selected_indices_: Optional[np.ndarray] = None

    def __repr__(self) -> str:
        return f"BalancedClassifier(ratio={self.config.ratio}, learner={type(self.learner).__name__})"

    @property
    def is_trained(self) -> bool:
        return self.selected_indices_ is not None

    def fit(
        self,
        X: np.ndarray,
        y: np.ndarray,
        sample_weight: Optional[np.ndarray] = None,
    ) -> "BalancedClassifier":
        """
        Train the learner on a class-balanced subset of (X, y).

        When one class is absent there is nothing to balance and the whole
        set is used.

        Raises:
            DegenerateTrainingError: Empty training set
        """
        X = np.asarray(X)
        y = np.asarray(y)
        if len(y) == 0:
            raise DegenerateTrainingError("No training instances")

        n_positive = int(np.sum(y == Label.POSITIVE))
        if n_positive == 0 or n_positive == len(y):
            logger.warning("Only one class present; training on the whole set")
            selected = np.arange(len(y))
        else:
            selected = balanced_indices(y, self.config.ratio, self.config.seed)

        if sample_weight is None:
            self.learner.fit(X[selected], y[selected])
        else:
            self.learner.fit(X[selected], y[selected], sample_weight=np.asarray(sample_weight)[selected])

        self.selected_indices_ = selected
        return self

    def _require_trained(self):
        if not self.is_trained:
            raise NotTrainedError("BalancedClassifier must be trained before prediction")

    def predict(self, X: np.ndarray) -> np.ndarray:
        self._require_trained()
        return self.learner.predict(X)

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        self._require_trained()
        if not hasattr(self.learner, "predict_proba"):
            raise ConfigurationError(
                f"Learner {type(self.learner).__name__} does not provide predict_proba"
            )
        return self.learner.predict_proba(X)
