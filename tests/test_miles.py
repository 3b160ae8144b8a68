"""
Tests for the MILES embedding and regressor.

The vectorised embedding is checked against a brute-force evaluation of
the distance definition, and the BLOSUM62 distance against hand-computed
sums (A/A = 4, A/D = -2, W/W = 11).
"""

import numpy as np
import pytest

from emas.core.errors import (
    ConfigurationError,
    DegenerateTrainingError,
    DimensionMismatchError,
    NotTrainedError,
)
from emas.core.models import LabeledSequence, SequenceRecord
from emas.core.sequence import extract_windows
from emas.predictors.miles import (
    MILESConfig,
    MILESEmbedder,
    MILESRegressor,
    ReferenceWindowSet,
    embed_miles,
    extract_reference_windows,
    make_learner,
    train_miles,
    window_distance,
)


# Amyloid-beta 1-16, 16-35 and 25-42; IAPP 20-35; alpha-synuclein NAC 68-78 region
ABETA_1_16 = "DAEFRHDSGYEVHHQK"
ABETA_16_35 = "KLVFFAEDVGSNKGAIIGLM"
ABETA_25_42 = "GSNKGAIIGLMVGGVVIA"
IAPP_20_35 = "SNNFGAILSSTNVGSN"
SYN_68_78 = "GAVVTGVTAVAQKT"

BAGS = [ABETA_1_16, ABETA_16_35, ABETA_25_42, IAPP_20_35, SYN_68_78]
TARGETS = [0.1, 0.9, 0.8, 0.7, 0.6]


def training_set():
    return [LabeledSequence(sequence=s, label=t) for s, t in zip(BAGS, TARGETS)]


def brute_force_embedding(reference, sequence):
    bag = extract_windows(sequence, reference.window_length)
    return np.array([min(window_distance(r, w) for w in bag) for r in reference])


class MeanLearner:
    """Predicts the mean training target."""

    def fit(self, X, y):
        self.mean_ = float(np.mean(y))
        self.n_features_ = X.shape[1]
        return self

    def predict(self, X):
        return np.full(len(X), self.mean_)


class TestWindowDistance:
    """Tests for the BLOSUM62 window distance."""

    def test_identical_windows(self):
        assert window_distance("A" * 9, "A" * 9) == pytest.approx(1 / 36)
        assert window_distance("W" * 9, "W" * 9) == pytest.approx(1 / 99)

    def test_dissimilar_windows(self):
        # Sum is -18, not positive
        assert window_distance("A" * 9, "D" * 9) == 1.0

    def test_mixed_sum(self):
        # 4 + 4 - 2 = 6
        assert window_distance("AAA", "AAD") == pytest.approx(1 / 6)

    def test_symmetric(self):
        assert window_distance(ABETA_16_35[:9], IAPP_20_35[:9]) == pytest.approx(
            window_distance(IAPP_20_35[:9], ABETA_16_35[:9])
        )

    def test_unknown_symbols_contribute_zero(self):
        assert window_distance("X" * 9, "X" * 9) == 1.0
        assert window_distance("AAX", "AAX") == pytest.approx(1 / 8)

    def test_length_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            window_distance("AAA", "AAAA")


class TestMILESConfig:
    """Tests for embedding configuration."""

    def test_defaults(self):
        config = MILESConfig()
        assert config.window_length == 9
        assert not config.subsample
        assert config.subsample_percent == 10
        assert config.seed == 1

    @pytest.mark.parametrize("percent", [0, -5, 100.5, 150])
    def test_illegal_percent(self, percent):
        with pytest.raises(ConfigurationError):
            MILESConfig(subsample=True, subsample_percent=percent)

    def test_illegal_window_length(self):
        with pytest.raises(ConfigurationError):
            MILESConfig(window_length=0)


class TestReferenceWindows:
    """Tests for reference set extraction and subsampling."""

    def test_all_windows(self):
        reference = extract_reference_windows(BAGS)
        expected = sum(len(s) - 8 for s in BAGS)
        assert len(reference) == expected
        assert reference.windows[0] == ABETA_1_16[:9]
        assert reference.encoded.shape == (expected, 9)

    def test_subsample_size(self):
        config = MILESConfig(subsample=True, subsample_percent=50)
        reference = extract_reference_windows(BAGS, config)
        total = sum(len(s) - 8 for s in BAGS)
        assert len(reference) == total // 2

    def test_subsample_deterministic(self):
        config = MILESConfig(subsample=True, subsample_percent=30, seed=7)
        first = extract_reference_windows(BAGS, config)
        second = extract_reference_windows(BAGS, config)
        assert first.windows == second.windows

    def test_different_seeds_differ(self):
        first = extract_reference_windows(
            BAGS, MILESConfig(subsample=True, subsample_percent=30, seed=1)
        )
        second = extract_reference_windows(
            BAGS, MILESConfig(subsample=True, subsample_percent=30, seed=2)
        )
        assert len(first.windows) == len(second.windows)
        assert first.windows != second.windows

    def test_subsample_is_subset(self):
        full = set(extract_reference_windows(BAGS).windows)
        sub = extract_reference_windows(BAGS, MILESConfig(subsample=True, subsample_percent=20))
        assert set(sub.windows) <= full

    def test_subsample_to_empty(self):
        # 8 windows at 10 % rounds down to none
        with pytest.raises(DegenerateTrainingError):
            extract_reference_windows(["A" * 16], MILESConfig(subsample=True, subsample_percent=10))

    def test_sequences_too_short(self):
        with pytest.raises(DegenerateTrainingError):
            extract_reference_windows(["KLVFF", "GNNQQNY"])

    def test_empty_reference_set(self):
        with pytest.raises(DegenerateTrainingError):
            ReferenceWindowSet(())

    def test_wrong_window_length(self):
        with pytest.raises(DimensionMismatchError):
            ReferenceWindowSet(("AAA",))


class TestEmbedding:
    """Tests for bag embedding."""

    @pytest.fixture
    def reference(self):
        return extract_reference_windows(BAGS)

    def test_embedding_length(self, reference):
        x = embed_miles(reference, ABETA_16_35)
        assert x.shape == (len(reference),)

    def test_matches_brute_force(self, reference):
        for seq in (ABETA_16_35, "MDVFMKGLSKAKEGVVAAAE"):
            assert embed_miles(reference, seq).tolist() == pytest.approx(
                brute_force_embedding(reference, seq).tolist()
            )

    def test_chunking_does_not_change_result(self, reference):
        small = MILESEmbedder(reference, MILESConfig(chunk_size=3)).embed(IAPP_20_35)
        large = MILESEmbedder(reference, MILESConfig(chunk_size=10000)).embed(IAPP_20_35)
        assert np.array_equal(small, large)

    def test_own_windows_are_near(self, reference):
        x = embed_miles(reference, ABETA_1_16)
        for i, window in enumerate(reference):
            if window in ABETA_1_16:
                assert x[i] <= window_distance(window, window)

    def test_distances_bounded(self, reference):
        x = embed_miles(reference, SYN_68_78)
        assert np.all(x > 0)
        assert np.all(x <= 1.0)

    def test_short_bag(self, reference):
        with pytest.raises(DimensionMismatchError):
            embed_miles(reference, "KLVFFAE")

    def test_embed_batch(self, reference):
        embedder = MILESEmbedder(reference, MILESConfig(max_workers=3))
        X = embedder.embed_batch(BAGS)
        assert X.shape == (len(BAGS), len(reference))
        assert np.array_equal(X[2], embedder.embed(ABETA_25_42))

    def test_window_length_mismatch(self, reference):
        with pytest.raises(ConfigurationError):
            MILESEmbedder(reference, MILESConfig(window_length=7))


class TestTrainMILES:
    """Tests for reference building plus embedding of training bags."""

    def test_dataset(self):
        reference, dataset = train_miles(training_set())
        assert dataset.X.shape == (len(BAGS), len(reference))
        assert dataset.y.tolist() == pytest.approx(TARGETS)
        assert dataset.weights.tolist() == [1.0] * len(BAGS)

    def test_subsample_argument(self):
        reference, dataset = train_miles(training_set(), subsample_percent=25, seed=3)
        total = sum(len(s) - 8 for s in BAGS)
        assert len(reference) == total // 4
        assert dataset.n_features == len(reference)

    def test_same_seed_same_embedding(self):
        ref_a, data_a = train_miles(training_set(), subsample_percent=40, seed=11)
        ref_b, data_b = train_miles(training_set(), subsample_percent=40, seed=11)
        assert ref_a.windows == ref_b.windows
        assert np.array_equal(data_a.X, data_b.X)

    def test_empty_training_set(self):
        with pytest.raises(DegenerateTrainingError):
            train_miles([])

    def test_short_training_bag(self):
        data = training_set() + [LabeledSequence(sequence="KLVFF", label=0.5)]
        with pytest.raises(DimensionMismatchError):
            train_miles(data)

    def test_illegal_percent(self):
        with pytest.raises(ConfigurationError):
            train_miles(training_set(), subsample_percent=0)


class TestMILESRegressor:
    """Tests for the regressor predictor."""

    def test_untrained(self):
        model = MILESRegressor()
        assert not model.is_trained
        with pytest.raises(NotTrainedError):
            model.predict(SequenceRecord(id="q", sequence=ABETA_16_35))

    def test_pluggable_learner(self):
        model = MILESRegressor(learner=MeanLearner()).fit(training_set())
        result = model.predict(SequenceRecord(id="q", sequence=ABETA_16_35))
        assert result.success
        assert result.value == pytest.approx(np.mean(TARGETS))
        assert result.probability is None
        assert model.learner.n_features_ == len(model.reference)

    @pytest.mark.parametrize("model_type", ["linear", "ridge", "random_forest"])
    def test_sklearn_learners(self, model_type):
        model = MILESRegressor(model_type=model_type).fit(training_set())
        values = model.predict_values(BAGS)
        assert values.shape == (len(BAGS),)
        assert np.all(np.isfinite(values))

    def test_predict_values_matches_predict(self):
        model = MILESRegressor().fit(training_set())
        values = model.predict_values([IAPP_20_35])
        result = model.predict(SequenceRecord(id="iapp", sequence=IAPP_20_35))
        assert result.value == pytest.approx(values[0])

    def test_short_sequence_reported(self):
        model = MILESRegressor(learner=MeanLearner()).fit(training_set())
        result = model.predict(SequenceRecord(id="short", sequence="KLVFF"))
        assert not result.success
        assert result.value is None

    def test_batch_order(self):
        model = MILESRegressor(learner=MeanLearner()).fit(training_set())
        records = [SequenceRecord(id=f"s{i}", sequence=s) for i, s in enumerate(BAGS)]
        results = model.predict_batch(records)
        assert [r.sequence_id for r in results] == [f"s{i}" for i in range(len(BAGS))]

    def test_unknown_model_type(self):
        with pytest.raises(ConfigurationError):
            make_learner("svm")

    def test_invalid_learner(self):
        with pytest.raises(ConfigurationError):
            MILESRegressor(learner=object())

    def test_embed(self):
        model = MILESRegressor(learner=MeanLearner()).fit(training_set())
        assert model.embed(ABETA_16_35).shape == (len(model.reference),)
