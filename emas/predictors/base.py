"""
Abstract base classes for sequence predictors.

This module defines the interface that all predictors implement, giving a
unified API over the self-contained scorers (PSSM, propensity scale) and
the embedding-plus-learner models (MILES). The design follows the Strategy
pattern, so predictors are interchangeable behind one interface.

Key design principles:
1. All predictors expose the same interface for predictions
2. Trained state is built once by ``fit`` and read-only afterwards
3. Batch prediction fans out per sequence and preserves input order
4. Per-input length errors are reported on the result, not raised
5. Pluggable learners are plain objects with ``fit``/``predict``
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from ..core.errors import (
    ConfigurationError,
    DimensionMismatchError,
    NotTrainedError,
)
from ..core.models import LabeledSequence, PredictionResult, SequenceRecord
from ..core.parallel import parallel_map

logger = logging.getLogger(__name__)


@runtime_checkable
class BaseLearner(Protocol):
    """
    Capability expected from a pluggable learner.

    Any object with scikit-learn style ``fit(X, y)`` and ``predict(X)``
    qualifies; no inheritance is required.
    """

    def fit(self, X: np.ndarray, y: np.ndarray, *args: Any, **kwargs: Any) -> Any:
        ...

    def predict(self, X: np.ndarray) -> np.ndarray:
        ...


class PredictorType(str, Enum):
    """Classification of predictor types by methodology."""

    PROFILE = "profile"  # PSSM
    SCALE = "scale"  # Propensity scale averaging
    MULTIPLE_INSTANCE = "multiple_instance"  # MILES embedding + learner


class PredictorCapability(Enum):
    """Capabilities that predictors may support."""

    BINARY_CLASSIFICATION = auto()  # Outputs P(positive)
    REGRESSION = auto()  # Outputs a numeric value
    FIXED_LENGTH_INPUT = auto()  # Requires windows of the trained length
    TRAINABLE = auto()  # Learns from labelled data
    BATCH_PROCESSING = auto()  # Can handle multiple sequences


@dataclass
class PredictorConfig:
    """
    Configuration for predictor behavior.

    Allows customization of thresholds and runtime parameters without
    modifying predictor code.
    """
    # Prediction parameters
    threshold: float = 0.5  # P(positive) at or above which is_positive is True

    # Runtime
    max_workers: int = 0  # Parallel workers for batch calls (0 = sequential)

    # Output
    return_raw_output: bool = False  # Include predictor-specific detail

    def __post_init__(self):
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(f"threshold must be in [0, 1], got {self.threshold}")
        if self.max_workers < 0:
            raise ConfigurationError(f"max_workers must be >= 0, got {self.max_workers}")


class BasePredictor(ABC):
    """
    Abstract base class for all predictors.

    Subclasses implement the actual scoring while this base class handles
    timing, result standardization and batch fan-out.

    Implementation guide for new predictors:
    1. Inherit from BasePredictor (or TrainablePredictor)
    2. Set class attributes (name, version, type, capabilities)
    3. Implement _predict_impl() with the actual prediction logic

    Example:
        class MyPredictor(BasePredictor):
            name = "MyPredictor"
            version = "1.0"
            predictor_type = PredictorType.SCALE
            capabilities = {PredictorCapability.BINARY_CLASSIFICATION}

            def _predict_impl(self, sequence: str) -> PredictionResult:
                ...
    """

    # Class attributes - must be set by subclasses
    name: str = "BasePredictor"
    version: str = "0.0"
    predictor_type: PredictorType = PredictorType.SCALE
    capabilities: set[PredictorCapability] = set()

    # Documentation
    citation: Optional[str] = None
    description: str = ""

    def __init__(self, config: Optional[PredictorConfig] = None):
        """
        Initialize predictor with configuration.

        Args:
            config: Predictor configuration (uses defaults if None)
        """
        self.config = config or PredictorConfig()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, version={self.version!r})"

    @property
    def threshold(self) -> float:
        return self.config.threshold

    @abstractmethod
    def _predict_impl(self, sequence: str) -> PredictionResult:
        """
        Internal prediction implementation.

        Args:
            sequence: Sequence (uppercase, whitespace removed)

        Returns:
            PredictionResult with at minimum ``probability`` or ``value``

        Raises:
            DimensionMismatchError: If the sequence length is unusable
        """
        pass

    def _empty_result(self, record: SequenceRecord, **kwargs: Any) -> PredictionResult:
        return PredictionResult(
            sequence_id=record.id,
            sequence=record.sequence,
            predictor_name=self.name,
            predictor_version=self.version,
            **kwargs,
        )

    def predict(self, record: SequenceRecord) -> PredictionResult:
        """
        Run prediction on one record.

        A sequence whose length the predictor cannot use yields a result
        with ``error_message`` set, so that batch callers can skip it. Any
        other error propagates.

        Args:
            record: SequenceRecord to predict

        Returns:
            PredictionResult with prediction data
        """
        start_time = time.time()
        try:
            result = self._predict_impl(record.sequence)
        except DimensionMismatchError as e:
            logger.warning(f"{self.name}: Skipping {record.id}: {e}")
            return self._empty_result(record, error_message=str(e))

        result.sequence_id = record.id
        result.sequence = record.sequence
        result.predictor_name = self.name
        result.predictor_version = self.version
        result.runtime_seconds = time.time() - start_time

        if result.is_positive is None and result.probability is not None:
            result.is_positive = result.probability >= self.threshold

        if not self.config.return_raw_output:
            result.raw_output = None

        return result

    def predict_batch(self, records: Sequence[SequenceRecord]) -> list[PredictionResult]:
        """
        Run predictions on multiple records.

        Args:
            records: Sequence of SequenceRecord objects

        Returns:
            List of PredictionResult objects in input order
        """
        return parallel_map(self.predict, records, self.config.max_workers)

    def get_info(self) -> dict[str, Any]:
        """
        Get predictor information for documentation/logging.

        Returns:
            Dictionary with predictor metadata
        """
        return {
            "name": self.name,
            "version": self.version,
            "type": self.predictor_type.value,
            "capabilities": sorted(c.name for c in self.capabilities),
            "threshold": self.threshold,
            "citation": self.citation,
            "description": self.description,
        }


class TrainablePredictor(BasePredictor):
    """
    Base class for predictors that learn from labelled data.

    Lifecycle is Untrained -> Trained. Re-fitting builds the new state
    completely before swapping it in, so a failed fit leaves the previous
    model untouched.
    """

    capabilities: set[PredictorCapability] = {PredictorCapability.TRAINABLE}

    @property
    @abstractmethod
    def is_trained(self) -> bool:
        pass

    @abstractmethod
    def fit(self, data: Sequence[LabeledSequence]) -> "TrainablePredictor":
        """
        Train the predictor on labelled data.

        Args:
            data: Training instances

        Returns:
            Self for method chaining
        """
        pass

    def fit_records(self, records: Sequence[SequenceRecord]) -> "TrainablePredictor":
        """Train from labelled SequenceRecords."""
        return self.fit([r.to_labeled() for r in records])

    def _require_trained(self):
        if not self.is_trained:
            raise NotTrainedError(f"{self.name} must be trained before prediction")

    def predict(self, record: SequenceRecord) -> PredictionResult:
        self._require_trained()
        return super().predict(record)

    def get_info(self) -> dict[str, Any]:
        info = super().get_info()
        info["trained"] = self.is_trained
        return info


# Registry for available predictors
_PREDICTOR_REGISTRY: dict[str, type[BasePredictor]] = {}


def register_predictor(predictor_class: type[BasePredictor]) -> type[BasePredictor]:
    """
    Decorator to register a predictor class.

    Usage:
        @register_predictor
        class MyPredictor(BasePredictor):
            name = "MyPredictor"
            ...
    """
    _PREDICTOR_REGISTRY[predictor_class.name] = predictor_class
    return predictor_class


def get_predictor(name: str, config: Optional[PredictorConfig] = None, **kwargs: Any) -> BasePredictor:
    """
    Get a predictor instance by name.

    Args:
        name: Predictor name
        config: Optional configuration
        **kwargs: Predictor-specific constructor arguments

    Returns:
        Predictor instance

    Raises:
        KeyError: If predictor not found
    """
    if name not in _PREDICTOR_REGISTRY:
        available = ", ".join(_PREDICTOR_REGISTRY.keys())
        raise KeyError(f"Predictor '{name}' not found. Available: {available}")

    return _PREDICTOR_REGISTRY[name](config, **kwargs)


def list_predictors() -> list[dict[str, Any]]:
    """
    List all registered predictors with their info.

    Returns:
        List of predictor info dictionaries
    """
    return [cls().get_info() for cls in _PREDICTOR_REGISTRY.values()]
