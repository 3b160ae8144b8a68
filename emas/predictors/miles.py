"""
MILES multiple-instance embedding of sequences over BLOSUM62 distances.

Multiple-instance learning treats each variable-length sequence as a
"bag" of its overlapping 9-residue windows ("instances"); only the bag
carries a label. MILES maps every bag into a fixed-size vector by
comparing it with a reference set of instances collected from the
training bags:

    embedding[i] = min over windows w of the bag of d(reference[i], w)

so a bag scores low on feature i when it contains some window similar to
reference window i. Window similarity is the summed BLOSUM62 score over
aligned positions, turned into a distance by

    d(w1, w2) = 1 / S   if S = sum_p BLOSUM62[w1[p], w2[p]] > 0
              = 1       otherwise

The embedded training set is handed to any regression learner with
``fit``/``predict``; prediction embeds a new bag against the same,
fixed reference set and asks the learner.

Reference:
    Chen, Y., Bi, J. & Wang, J.Z. (2006). MILES: Multiple-instance learning
    via embedded instance selection. IEEE TPAMI 28(12):1931-1947.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from emas.core.errors import (
    ConfigurationError,
    DegenerateTrainingError,
    DimensionMismatchError,
)
from emas.core.models import LabeledSequence, PredictionResult
from emas.core.parallel import parallel_map
from emas.core.sequence import clean_sequence, extract_windows
from emas.core.tables import BLOSUM62, Alphabet, SubstitutionMatrix
from emas.predictors.base import (
    BaseLearner,
    PredictorCapability,
    PredictorConfig,
    PredictorType,
    TrainablePredictor,
    register_predictor,
)

logger = logging.getLogger(__name__)


DEFAULT_WINDOW_LENGTH = 9


@dataclass
class MILESConfig:
    """
    Configuration for reference window extraction and embedding.

    Attributes:
        window_length: Instance (window) length
        subsample: Keep only a seeded random subset of the reference windows
        subsample_percent: Size of that subset, in percent of all windows
        seed: Seed of the subsampling permutation
        chunk_size: Reference windows compared per vectorised block
        max_workers: Parallel workers for batch embedding (0 = sequential)
        substitution: Pair scores summed by the window distance
    """
    window_length: int = DEFAULT_WINDOW_LENGTH
    subsample: bool = False
    subsample_percent: float = 10.0
    seed: int = 1
    chunk_size: int = 2048
    max_workers: int = 0
    substitution: SubstitutionMatrix = BLOSUM62

    def __post_init__(self):
        if self.window_length < 1:
            raise ConfigurationError(f"window_length must be >= 1, got {self.window_length}")
        if not 0 < self.subsample_percent <= 100:
            raise ConfigurationError(
                f"subsample_percent must be in (0, 100], got {self.subsample_percent}"
            )
        if self.chunk_size < 1:
            raise ConfigurationError(f"chunk_size must be >= 1, got {self.chunk_size}")


def encode_windows(windows: Sequence[str], alphabet: Alphabet) -> np.ndarray:
    """Index matrix of shape (n_windows, window_length); -1 marks unknown symbols."""
    if not windows:
        return np.zeros((0, 0), dtype=np.int64)
    return np.vstack([alphabet.indices(w) for w in windows])


def window_distance(w1: str, w2: str, matrix: SubstitutionMatrix = BLOSUM62) -> float:
    """
    Substitution distance between two equal-length windows.

    Symbols outside the matrix alphabet contribute zero to the sum.

    Raises:
        DimensionMismatchError: If the windows differ in length
    """
    if len(w1) != len(w2):
        raise DimensionMismatchError(
            f"Cannot compare windows of length {len(w1)} and {len(w2)}"
        )
    total = sum(matrix.score(a, b) for a, b in zip(w1, w2))
    return 1.0 / total if total > 0 else 1.0


@dataclass(frozen=True, eq=False)
class ReferenceWindowSet:
    """
    Fixed set of reference windows defining the embedding dimensions.

    Built once during training and read-only afterwards.
    """
    windows: tuple[str, ...]
    window_length: int = DEFAULT_WINDOW_LENGTH
    alphabet: Alphabet = BLOSUM62.alphabet
    encoded: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        windows = tuple(self.windows)
        if not windows:
            raise DegenerateTrainingError("Reference window set is empty")
        for w in windows:
            if len(w) != self.window_length:
                raise DimensionMismatchError(
                    f"Reference window {w!r} is not of length {self.window_length}"
                )
        encoded = encode_windows(windows, self.alphabet)
        encoded.setflags(write=False)
        object.__setattr__(self, "windows", windows)
        object.__setattr__(self, "encoded", encoded)

    def __len__(self) -> int:
        return len(self.windows)

    def __iter__(self):
        return iter(self.windows)

    @property
    def size(self) -> int:
        return len(self.windows)


def extract_reference_windows(
    sequences: Sequence[str],
    config: Optional[MILESConfig] = None,
) -> ReferenceWindowSet:
    """
    Collect every window of every sequence, optionally subsampled.

    With ``config.subsample`` the windows are shuffled by a permutation
    seeded with ``config.seed`` and the first
    floor(n * subsample_percent / 100) are kept, so the same seed and
    percentage always give the same set.

    Raises:
        DegenerateTrainingError: If no window survives
    """
    config = config or MILESConfig()
    windows: list[str] = []
    for seq in sequences:
        windows.extend(extract_windows(clean_sequence(seq), config.window_length))

    n_total = len(windows)
    if config.subsample and n_total:
        order = np.random.default_rng(config.seed).permutation(n_total)
        n_keep = int(n_total * config.subsample_percent / 100)
        windows = [windows[i] for i in order[:n_keep]]
        logger.debug(
            f"Subsampled {n_keep} of {n_total} reference windows "
            f"({config.subsample_percent}%, seed={config.seed})"
        )

    if not windows:
        raise DegenerateTrainingError(
            f"No reference windows of length {config.window_length} "
            f"from {len(sequences)} sequences"
        )

    return ReferenceWindowSet(
        tuple(windows), config.window_length, config.substitution.alphabet
    )


class MILESEmbedder:
    """
    Maps bags (sequences) to min-distance vectors over a reference set.

    Usage:
        >>> reference = extract_reference_windows(training_sequences)
        >>> embedder = MILESEmbedder(reference)
        >>> x = embedder.embed("MKTAYIAKQRQISFVKSHFSRQ")
        >>> x.shape == (len(reference),)
        True
    """

    def __init__(self, reference: ReferenceWindowSet, config: Optional[MILESConfig] = None):
        self.reference = reference
        self.config = config or MILESConfig(window_length=reference.window_length)
        if self.config.window_length != reference.window_length:
            raise ConfigurationError(
                f"Config window length {self.config.window_length} does not match "
                f"reference window length {reference.window_length}"
            )
        matrix = self.config.substitution
        if matrix.alphabet.symbols != reference.alphabet.symbols:
            matrix = matrix.reindex(reference.alphabet)
        self._scores = matrix.padded()

    @property
    def n_features(self) -> int:
        return len(self.reference)

    def embed(self, sequence: str) -> np.ndarray:
        """
        Embed one bag.

        Raises:
            DimensionMismatchError: If the sequence is shorter than one window
        """
        bag = extract_windows(
            clean_sequence(sequence), self.reference.window_length, min_windows=1
        )
        bag_idx = encode_windows(bag, self.reference.alphabet)
        ref_idx = self.reference.encoded
        out = np.empty(len(ref_idx))

        for start in range(0, len(ref_idx), self.config.chunk_size):
            block = ref_idx[start:start + self.config.chunk_size]
            totals = np.zeros((len(block), len(bag_idx)))
            for p in range(self.reference.window_length):
                totals += self._scores[block[:, p][:, None], bag_idx[:, p][None, :]]
            dist = np.ones_like(totals)
            np.divide(1.0, totals, out=dist, where=totals > 0)
            out[start:start + len(block)] = dist.min(axis=1)

        return out

    def embed_batch(self, sequences: Sequence[str]) -> np.ndarray:
        """Embed many bags; rows in input order."""
        rows = parallel_map(self.embed, sequences, self.config.max_workers)
        if not rows:
            return np.zeros((0, self.n_features))
        return np.vstack(rows)


def embed_miles(
    reference: ReferenceWindowSet,
    sequence: str,
    matrix: SubstitutionMatrix = BLOSUM62,
) -> np.ndarray:
    """Embed one bag against ``reference``."""
    config = MILESConfig(window_length=reference.window_length, substitution=matrix)
    return MILESEmbedder(reference, config).embed(sequence)


@dataclass
class EmbeddedDataset:
    """Training bags mapped into the embedding space."""
    X: np.ndarray
    y: np.ndarray
    weights: np.ndarray

    @property
    def n_samples(self) -> int:
        return self.X.shape[0]

    @property
    def n_features(self) -> int:
        return self.X.shape[1]


def train_miles(
    labeled_sequences: Sequence[LabeledSequence],
    subsample_percent: Optional[float] = None,
    seed: Optional[int] = None,
    config: Optional[MILESConfig] = None,
) -> tuple[ReferenceWindowSet, EmbeddedDataset]:
    """
    Build the reference set and embed the training bags.

    Args:
        labeled_sequences: Training bags with numeric targets
        subsample_percent: If given, turns subsampling on with this percentage
        seed: Overrides ``config.seed``
        config: Embedding configuration

    Returns:
        Tuple of (reference window set, embedded training set)

    Raises:
        DegenerateTrainingError: No training bags or no reference windows
        DimensionMismatchError: A training bag is shorter than one window
        ConfigurationError: Illegal subsampling percentage
    """
    config = config or MILESConfig()
    if subsample_percent is not None or seed is not None:
        config = MILESConfig(
            window_length=config.window_length,
            subsample=config.subsample or subsample_percent is not None,
            subsample_percent=(
                subsample_percent if subsample_percent is not None
                else config.subsample_percent
            ),
            seed=seed if seed is not None else config.seed,
            chunk_size=config.chunk_size,
            max_workers=config.max_workers,
            substitution=config.substitution,
        )

    bags = list(labeled_sequences)
    if not bags:
        raise DegenerateTrainingError("No training sequences")

    sequences = [b.sequence for b in bags]
    reference = extract_reference_windows(sequences, config)
    logger.info(f"MILES reference set: {len(reference)} windows from {len(bags)} bags")

    embedder = MILESEmbedder(reference, config)
    dataset = EmbeddedDataset(
        X=embedder.embed_batch(sequences),
        y=np.array([b.label for b in bags], dtype=float),
        weights=np.array([b.weight for b in bags], dtype=float),
    )
    return reference, dataset


# =============================================================================
# Predictor
# =============================================================================

def make_learner(model_type: str = "ridge") -> BaseLearner:
    """
    Build a scikit-learn regressor by name.

    Args:
        model_type: 'linear', 'ridge' or 'random_forest'

    Raises:
        ConfigurationError: Unknown model type
    """
    if model_type == "linear":
        from sklearn.linear_model import LinearRegression
        return LinearRegression()
    elif model_type == "ridge":
        from sklearn.linear_model import Ridge
        return Ridge(alpha=1.0)
    elif model_type == "random_forest":
        from sklearn.ensemble import RandomForestRegressor
        return RandomForestRegressor(n_estimators=100, random_state=42)
    raise ConfigurationError(f"Unknown model type: {model_type}")


@register_predictor
class MILESRegressor(TrainablePredictor):
    """
    Multiple-instance regression over bags of 9-mers.

    The embedding is computed here; the regression itself is delegated to
    a pluggable learner (any object with ``fit``/``predict``).

    Usage:
        >>> model = MILESRegressor(learner=Ridge())
        >>> model.fit(training_bags)
        >>> model.predict(SequenceRecord(id="q", sequence=query)).value
    """

    name = "MILES"
    version = "1.0"
    predictor_type = PredictorType.MULTIPLE_INSTANCE
    capabilities = {
        PredictorCapability.REGRESSION,
        PredictorCapability.TRAINABLE,
        PredictorCapability.BATCH_PROCESSING,
    }

    citation = (
        "Chen, Y., Bi, J. & Wang, J.Z. (2006). MILES: Multiple-instance learning "
        "via embedded instance selection. IEEE TPAMI 28:1931-1947."
    )
    description = (
        "Embeds each sequence as minimum BLOSUM62 distances to reference "
        "9-mers and regresses with a pluggable learner."
    )

    def __init__(
        self,
        config: Optional[PredictorConfig] = None,
        miles_config: Optional[MILESConfig] = None,
        learner: Optional[BaseLearner] = None,
        model_type: str = "ridge",
    ):
        super().__init__(config)
        self.miles_config = miles_config or MILESConfig()
        if learner is not None and not isinstance(learner, BaseLearner):
            raise ConfigurationError(
                f"Learner {type(learner).__name__} does not provide fit/predict"
            )
        self._learner_template = learner
        self.model_type = model_type
        self._embedder: Optional[MILESEmbedder] = None
        self._learner: Optional[BaseLearner] = None

    @property
    def is_trained(self) -> bool:
        return self._embedder is not None and self._learner is not None

    @property
    def reference(self) -> ReferenceWindowSet:
        self._require_trained()
        return self._embedder.reference

    @property
    def learner(self) -> BaseLearner:
        self._require_trained()
        return self._learner

    def fit(self, data: Sequence[LabeledSequence]) -> "MILESRegressor":
        reference, dataset = train_miles(data, config=self.miles_config)
        learner = self._learner_template
        if learner is None:
            learner = make_learner(self.model_type)

        logger.info(
            f"Training {type(learner).__name__} on {dataset.n_samples} bags "
            f"x {dataset.n_features} features"
        )
        learner.fit(dataset.X, dataset.y)

        self._embedder = MILESEmbedder(reference, self.miles_config)
        self._learner = learner
        return self

    def embed(self, sequence: str) -> np.ndarray:
        """Embedding of one bag against the trained reference set."""
        self._require_trained()
        return self._embedder.embed(sequence)

    def predict_values(self, sequences: Sequence[str]) -> np.ndarray:
        """Regression outputs for many bags in one learner call."""
        self._require_trained()
        X = self._embedder.embed_batch(sequences)
        return np.asarray(self._learner.predict(X), dtype=float).ravel()

    def _predict_impl(self, sequence: str) -> PredictionResult:
        x = self._embedder.embed(sequence)
        value = float(np.asarray(self._learner.predict(x.reshape(1, -1))).ravel()[0])
        return PredictionResult(
            sequence_id="",
            sequence=sequence,
            predictor_name=self.name,
            score=value,
            value=value,
            raw_output={"min_distance": float(x.min()), "n_features": x.size},
        )
