"""
Propensity-scale window scorer.

Assigns a score to a sequence window by averaging a per-residue property
scale over its residues, then maps the average to a probability with the
logistic function. With Parker's hydrophilicity scale (the default) this
is the classic surface-exposure/antigenicity index; any other scale from
the table registry, or an explicit list of values, can be used instead.

Nothing is learned: ``fit`` only checks that the training windows agree
with the configured window size.

Reference:
    Parker, J.M., Guo, D. & Hodges, R.S. (1986). New hydrophilicity scale
    derived from high-performance liquid chromatography peptide retention
    data. Biochemistry 25:5425-5432.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from emas.core.errors import ConfigurationError, DimensionMismatchError
from emas.core.models import LabeledSequence, PredictionResult
from emas.core.tables import BLOSUM_ORDER, Alphabet, PropensityScale, get_scale
from emas.predictors.base import (
    BasePredictor,
    PredictorCapability,
    PredictorConfig,
    PredictorType,
    register_predictor,
)
from emas.predictors.pssm import logistic

logger = logging.getLogger(__name__)


@dataclass
class PropensityConfig:
    """
    Configuration for the propensity scorer.

    Attributes:
        scale: Registered scale name or a PropensityScale
        values: Explicit scale values (comma separated string or list);
            overrides ``scale`` when given
        alphabet: Symbol order of ``values``
        window_size: Required window length, or None for any length
    """
    scale: Union[str, PropensityScale] = "parker"
    values: Optional[Union[str, Sequence[float]]] = None
    alphabet: Union[str, Alphabet] = BLOSUM_ORDER
    window_size: Optional[int] = None

    def __post_init__(self):
        if self.window_size is not None:
            if self.window_size < 1:
                raise ConfigurationError(f"window_size must be >= 1, got {self.window_size}")
            if self.window_size % 2 == 0:
                raise ConfigurationError(
                    f"Window size should be an odd number, got {self.window_size}"
                )

    def resolve_scale(self) -> PropensityScale:
        """
        Build the scale described by this configuration.

        Raises:
            ConfigurationError: Unknown scale name, malformed values, or a
                value count that differs from the alphabet size
        """
        if self.values is not None:
            if isinstance(self.values, str):
                return PropensityScale.from_string("custom", self.values, self.alphabet)
            alphabet = self.alphabet if isinstance(self.alphabet, Alphabet) else Alphabet(self.alphabet)
            return PropensityScale("custom", alphabet, list(self.values))
        if isinstance(self.scale, PropensityScale):
            return self.scale
        return get_scale(self.scale)


@register_predictor
class PropensityScalePredictor(BasePredictor):
    """
    Average-propensity scorer for sequence windows.

    Usage:
        >>> predictor = PropensityScalePredictor(propensity_config=PropensityConfig(scale="kyte_doolittle"))
        >>> predictor.window_score("IVLIV") > 0
        True
    """

    name = "PropensityScale"
    version = "1.0"
    predictor_type = PredictorType.SCALE
    capabilities = {
        PredictorCapability.BINARY_CLASSIFICATION,
        PredictorCapability.BATCH_PROCESSING,
    }

    citation = (
        "Parker, J.M., Guo, D. & Hodges, R.S. (1986). Biochemistry 25:5425-5432."
    )
    description = (
        "Mean per-residue propensity over a window, mapped to a probability "
        "with the logistic function."
    )

    def __init__(
        self,
        config: Optional[PredictorConfig] = None,
        propensity_config: Optional[PropensityConfig] = None,
    ):
        super().__init__(config)
        self.propensity_config = propensity_config or PropensityConfig()
        self.scale = self.propensity_config.resolve_scale()
        self.window_size = self.propensity_config.window_size

    def fit(self, data: Sequence[LabeledSequence]) -> "PropensityScalePredictor":
        """
        Check training windows against the configured window size.

        Raises:
            DimensionMismatchError: If a window length differs from ``window_size``
        """
        if self.window_size is not None:
            for item in data:
                if len(item.sequence) != self.window_size:
                    raise DimensionMismatchError(
                        f"Training window {item.sequence!r} is not of length {self.window_size}"
                    )
        return self

    def window_score(self, window: str) -> float:
        """
        Sum of scale values over in-alphabet symbols, divided by window length.

        Raises:
            DimensionMismatchError: If ``window_size`` is set and differs from len(window)
        """
        if self.window_size is not None and len(window) != self.window_size:
            raise DimensionMismatchError(
                f"Window length {len(window)} does not match window size {self.window_size}"
            )
        if not window:
            return 0.0

        total = 0.0
        for symbol in window:
            if symbol in self.scale.alphabet:
                total += self.scale.value_of(symbol)
            else:
                logger.warning(f"Illegal alphabet symbol {symbol!r} will be skipped")
        return total / len(window)

    def _predict_impl(self, sequence: str) -> PredictionResult:
        score = self.window_score(sequence)
        return PredictionResult(
            sequence_id="",
            sequence=sequence,
            predictor_name=self.name,
            score=score,
            probability=logistic(score),
            raw_output={"scale": self.scale.name},
        )
