"""
Tests for the class-balancing wrapper.
"""

import numpy as np
import pytest

from emas.core.errors import ConfigurationError, DegenerateTrainingError, NotTrainedError
from emas.predictors.balanced import BalancedClassifier, BalancedConfig, balanced_indices


# 2 positives, 6 negatives
Y_IMBALANCED = np.array([1, 0, 0, 1, 0, 0, 0, 0])
X_IMBALANCED = np.arange(8, dtype=float).reshape(-1, 1)


class RecordingLearner:
    """Remembers what it was trained on."""

    def fit(self, X, y, sample_weight=None):
        self.X_ = np.asarray(X)
        self.y_ = np.asarray(y)
        self.sample_weight_ = sample_weight
        return self

    def predict(self, X):
        return np.ones(len(X), dtype=int)


class TestBalancedIndices:
    """Tests for subset selection."""

    def test_ratio_one(self):
        idx = balanced_indices(Y_IMBALANCED, ratio=1.0, seed=1)
        assert len(idx) == 4
        assert idx[:2].tolist() == [0, 3]
        assert np.sum(Y_IMBALANCED[idx] == 1) == 2

    def test_ratio_two(self):
        idx = balanced_indices(Y_IMBALANCED, ratio=2.0)
        assert len(idx) == 6
        assert np.sum(Y_IMBALANCED[idx] == 0) == 4

    def test_fractional_ratio_rounds_up(self):
        idx = balanced_indices(Y_IMBALANCED, ratio=1.5)
        assert np.sum(Y_IMBALANCED[idx] == 0) == 3

    def test_ratio_capped_by_majority(self):
        idx = balanced_indices(Y_IMBALANCED, ratio=10.0)
        assert sorted(idx.tolist()) == list(range(8))

    def test_positive_majority(self):
        y = 1 - Y_IMBALANCED
        idx = balanced_indices(y, ratio=1.0)
        assert np.sum(y[idx] == 1) == 2
        assert np.sum(y[idx] == 0) == 2

    def test_no_duplicates(self):
        idx = balanced_indices(Y_IMBALANCED, ratio=2.0)
        assert len(set(idx.tolist())) == len(idx)

    def test_seeded(self):
        a = balanced_indices(Y_IMBALANCED, ratio=1.0, seed=5)
        b = balanced_indices(Y_IMBALANCED, ratio=1.0, seed=5)
        assert np.array_equal(a, b)


class TestBalancedClassifier:
    """Tests for the wrapper around a learner."""

    def test_learner_sees_balanced_data(self):
        learner = RecordingLearner()
        BalancedClassifier(learner).fit(X_IMBALANCED, Y_IMBALANCED)
        assert len(learner.y_) == 4
        assert np.sum(learner.y_ == 1) == 2

    def test_sample_weight_subset(self):
        learner = RecordingLearner()
        weights = np.arange(8, dtype=float)
        clf = BalancedClassifier(learner).fit(X_IMBALANCED, Y_IMBALANCED, sample_weight=weights)
        assert learner.sample_weight_.tolist() == weights[clf.selected_indices_].tolist()

    def test_single_class_uses_whole_set(self):
        learner = RecordingLearner()
        BalancedClassifier(learner).fit(X_IMBALANCED, np.zeros(8))
        assert len(learner.y_) == 8

    def test_prediction_delegated(self):
        clf = BalancedClassifier(RecordingLearner()).fit(X_IMBALANCED, Y_IMBALANCED)
        assert clf.predict(X_IMBALANCED).tolist() == [1] * 8

    def test_default_learner(self):
        clf = BalancedClassifier(config=BalancedConfig(ratio=1.0, seed=3))
        clf.fit(X_IMBALANCED, Y_IMBALANCED)
        proba = clf.predict_proba(X_IMBALANCED)
        assert proba.shape == (8, 2)
        assert np.allclose(proba.sum(axis=1), 1.0)

    def test_predict_proba_unsupported(self):
        clf = BalancedClassifier(RecordingLearner()).fit(X_IMBALANCED, Y_IMBALANCED)
        with pytest.raises(ConfigurationError):
            clf.predict_proba(X_IMBALANCED)

    def test_untrained(self):
        with pytest.raises(NotTrainedError):
            BalancedClassifier(RecordingLearner()).predict(X_IMBALANCED)

    def test_empty(self):
        with pytest.raises(DegenerateTrainingError):
            BalancedClassifier(RecordingLearner()).fit(np.zeros((0, 1)), np.zeros(0))

    def test_invalid_ratio(self):
        with pytest.raises(ConfigurationError):
            BalancedConfig(ratio=0)

    def test_invalid_learner(self):
        with pytest.raises(ConfigurationError):
            BalancedClassifier(learner=object())
