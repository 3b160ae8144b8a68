"""
Position-specific scoring matrix (PSSM) profile builder and scorer.

A PSSM summarises a set of aligned, equal-length positive windows as a
Length x |A| matrix of log-odds scores. Each entry compares how often a
symbol occurs at a column among the positives (foreground) with how often
it is expected there by chance (background, either estimated from the
negative windows or uniform).

Small training sets give unstable column frequencies, so both estimates
are regularized with the Henikoff & Henikoff pseudo-count method. The
pseudo-count for symbol a in column c is derived from the observed column
composition through the BLOSUM62 substitution probabilities q_ia:

    N        = total weight of the windows
    B        = sqrt(N)
    g[c][a]  = B * sum_i n[c][i] * q[i][a] / (N * Q[i]),   Q[i] = sum_a q[i][a]
    p[c][a]  = N/(N+B) * n[c][a]/N + B/(N+B) * g[c][a]/B
    PSSM     = ln(p_foreground / p_background)

A window is scored by summing the matrix entries of its symbols column by
column; the logistic function maps the sum to P(positive).

Reference:
    Henikoff, J.G. & Henikoff, S. (1996). Using substitution probabilities
    to improve position-specific scoring matrices. CABIOS 12(2):135-143.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence

import numpy as np

from emas.core.errors import (
    ConfigurationError,
    DegenerateTrainingError,
    DimensionMismatchError,
)
from emas.core.models import LabeledSequence, PredictionResult
from emas.core.tables import (
    BLOSUM62_QIJ,
    STANDARD_ALPHABET,
    Alphabet,
    SubstitutionMatrix,
)
from emas.predictors.base import (
    PredictorCapability,
    PredictorConfig,
    PredictorType,
    TrainablePredictor,
    register_predictor,
)

logger = logging.getLogger(__name__)


def logistic(x: float) -> float:
    """Numerically stable 1 / (1 + e^-x)."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


@dataclass
class PSSMConfig:
    """
    Configuration for profile building.

    Attributes:
        use_negative_background: Estimate background probabilities from the
            negative windows; otherwise assume a uniform 1/|A| background
        alphabet: Symbols with a profile row
        substitution: Pair probabilities used for pseudo-counts
    """
    use_negative_background: bool = True
    alphabet: Alphabet = STANDARD_ALPHABET
    substitution: SubstitutionMatrix = BLOSUM62_QIJ

    def __post_init__(self):
        if self.substitution.alphabet.symbols != self.alphabet.symbols:
            self.substitution = self.substitution.reindex(self.alphabet)
        if np.any(self.substitution.values.sum(axis=1) <= 0):
            raise ConfigurationError(
                f"Substitution matrix '{self.substitution.name}' has an all-zero row"
            )


@dataclass(frozen=True, eq=False)
class PSSMProfile:
    """
    Trained, read-only log-odds profile.

    ``matrix[c, a]`` is the log-odds score of alphabet symbol ``a`` at
    window column ``c``.
    """
    matrix: np.ndarray
    alphabet: Alphabet = STANDARD_ALPHABET

    def __post_init__(self):
        matrix = np.array(self.matrix, dtype=float)
        if matrix.ndim != 2 or matrix.shape[1] != len(self.alphabet):
            raise ConfigurationError(
                f"Profile shape {matrix.shape} does not match alphabet size {len(self.alphabet)}"
            )
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)

    @property
    def length(self) -> int:
        """Window length the profile was trained on."""
        return self.matrix.shape[0]

    def raw_score(self, window: str) -> float:
        """
        Sum of log-odds entries for ``window``.

        Symbols outside the alphabet are skipped.

        Raises:
            DimensionMismatchError: If len(window) differs from the profile length
        """
        if len(window) != self.length:
            raise DimensionMismatchError(
                f"Window length {len(window)} does not match profile length {self.length}"
            )
        idx = self.alphabet.indices(window)
        known = idx >= 0
        if not known.all():
            logger.debug(f"Skipping {int((~known).sum())} unknown symbols in {window!r}")
        columns = np.arange(self.length)
        return float(self.matrix[columns[known], idx[known]].sum())

    def score(self, window: str) -> float:
        """P(positive) for ``window``, the logistic of its raw score."""
        return logistic(self.raw_score(window))

    def to_flat(self) -> np.ndarray:
        """Row-major flattening of the matrix (column after column of the window)."""
        return self.matrix.reshape(-1).copy()

    def consensus(self) -> str:
        """Highest-scoring symbol at every column."""
        return "".join(self.alphabet.symbols[i] for i in self.matrix.argmax(axis=1))

    def __str__(self) -> str:
        lines = [f"PSSM profile (length={self.length}, alphabet={self.alphabet.symbols})"]
        for row in self.matrix:
            lines.append(" ".join(f"{v:.4f}" for v in row))
        return "\n".join(lines)


# =============================================================================
# Estimation
# =============================================================================

def count_symbols(
    windows: Sequence[LabeledSequence],
    length: int,
    alphabet: Alphabet = STANDARD_ALPHABET,
) -> tuple[np.ndarray, float]:
    """
    Weighted symbol counts per column.

    Returns:
        Tuple of (counts of shape (length, |A|), total weight N)
    """
    counts = np.zeros((length, len(alphabet)))
    total = 0.0
    for w in windows:
        total += w.weight
        idx = alphabet.indices(w.sequence)
        for c in np.nonzero(idx >= 0)[0]:
            counts[c, idx[c]] += w.weight
    return counts, total


def estimate_probabilities(
    windows: Sequence[LabeledSequence],
    length: int,
    substitution: SubstitutionMatrix = BLOSUM62_QIJ,
) -> np.ndarray:
    """
    Pseudo-count regularized per-column symbol probabilities.

    Args:
        windows: Equal-length windows of one class
        length: Window length
        substitution: Pair probabilities q_ia over the profile alphabet

    Returns:
        Array of shape (length, |A|)

    Raises:
        DegenerateTrainingError: If the windows carry no weight
    """
    n, total = count_symbols(windows, length, substitution.alphabet)
    if total <= 0:
        raise DegenerateTrainingError("Cannot estimate probabilities from zero total weight")

    q = substitution.values
    Q = q.sum(axis=1)
    B = math.sqrt(total)

    g = B * ((n / (total * Q)) @ q)
    return (total / (total + B)) * (n / total) + (B / (total + B)) * (g / B)


def train_pssm(
    labeled_windows: Sequence[LabeledSequence],
    use_negative_background: bool = True,
    config: Optional[PSSMConfig] = None,
) -> PSSMProfile:
    """
    Build a log-odds profile from labelled, equal-length windows.

    Args:
        labeled_windows: Windows labelled Label.POSITIVE (foreground) or not
        use_negative_background: Estimate the background from the negative
            windows; falls back to uniform when there are none
        config: Alphabet and substitution matrix (the flag above wins over
            ``config.use_negative_background``)

    Returns:
        Trained PSSMProfile

    Raises:
        DegenerateTrainingError: Empty input or no weighted positive windows
        DimensionMismatchError: Windows of unequal length
    """
    config = config or PSSMConfig()
    windows = list(labeled_windows)
    if not windows:
        raise DegenerateTrainingError("No training windows")

    length = len(windows[0].sequence)
    if length == 0:
        raise DegenerateTrainingError("Training windows are empty")
    for w in windows:
        if len(w.sequence) != length:
            raise DimensionMismatchError(
                f"Training window {w.sequence!r} has length {len(w.sequence)}, expected {length}"
            )

    positives = [w for w in windows if w.is_positive]
    negatives = [w for w in windows if not w.is_positive]
    if sum(w.weight for w in positives) <= 0:
        raise DegenerateTrainingError("No positive training windows with non-zero weight")

    logger.info(
        f"Building PSSM of length {length} from {len(positives)} positive "
        f"and {len(negatives)} negative windows"
    )

    foreground = estimate_probabilities(positives, length, config.substitution)

    n_symbols = len(config.alphabet)
    if use_negative_background and sum(w.weight for w in negatives) > 0:
        background = estimate_probabilities(negatives, length, config.substitution)
    else:
        logger.debug("Using uniform background probabilities")
        background = np.full((length, n_symbols), 1.0 / n_symbols)

    return PSSMProfile(np.log(foreground / background), config.alphabet)


def score_pssm(profile: PSSMProfile, window: str) -> float:
    """
    Probability in [0, 1] that ``window`` is positive under ``profile``.

    Raises:
        DimensionMismatchError: If len(window) != profile.length
    """
    return profile.score(window)


# =============================================================================
# Predictor
# =============================================================================

@register_predictor
class PSSMPredictor(TrainablePredictor):
    """
    Self-contained PSSM classifier over fixed-length windows.

    Usage:
        >>> predictor = PSSMPredictor(use_negative_background=False)
        >>> predictor.fit([LabeledSequence(sequence="AAA", label=1)] * 3)
        >>> predictor.predict(SequenceRecord(id="w", sequence="AAA")).probability > 0.5
        True
    """

    name = "PSSM"
    version = "1.0"
    predictor_type = PredictorType.PROFILE
    capabilities = {
        PredictorCapability.BINARY_CLASSIFICATION,
        PredictorCapability.FIXED_LENGTH_INPUT,
        PredictorCapability.TRAINABLE,
        PredictorCapability.BATCH_PROCESSING,
    }

    citation = (
        "Henikoff, J.G. & Henikoff, S. (1996). Using substitution probabilities "
        "to improve position-specific scoring matrices. CABIOS 12:135-143."
    )
    description = (
        "Position-specific log-odds profile with BLOSUM62 pseudo-counts; "
        "window score mapped to a probability with the logistic function."
    )

    def __init__(
        self,
        config: Optional[PredictorConfig] = None,
        pssm_config: Optional[PSSMConfig] = None,
        use_negative_background: Optional[bool] = None,
    ):
        super().__init__(config)
        self.pssm_config = pssm_config or PSSMConfig()
        if use_negative_background is not None:
            self.pssm_config = replace(
                self.pssm_config, use_negative_background=use_negative_background
            )
        self._profile: Optional[PSSMProfile] = None

    @property
    def is_trained(self) -> bool:
        return self._profile is not None

    @property
    def profile(self) -> PSSMProfile:
        self._require_trained()
        return self._profile

    def fit(self, data: Sequence[LabeledSequence]) -> "PSSMPredictor":
        self._profile = train_pssm(
            data,
            use_negative_background=self.pssm_config.use_negative_background,
            config=self.pssm_config,
        )
        return self

    def _predict_impl(self, sequence: str) -> PredictionResult:
        raw = self._profile.raw_score(sequence)
        return PredictionResult(
            sequence_id="",
            sequence=sequence,
            predictor_name=self.name,
            score=raw,
            probability=logistic(raw),
            raw_output={"profile_length": self._profile.length},
        )

    def score(self, window: str) -> float:
        """P(positive) for a bare window string."""
        return score_pssm(self.profile, window)
