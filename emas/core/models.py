"""
Core data models for emas.

This module defines the records that flow between the external dataset
collaborator and the encoding/scoring engine: labelled training
sequences, unlabelled records to predict on, and prediction results.
All models use Pydantic for validation and serialization.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Label(IntEnum):
    """
    Binary class labels.

    The positive class is always ``Label.POSITIVE`` (1); scorers never
    compare against a bare integer literal.
    """
    NEGATIVE = 0
    POSITIVE = 1


def _normalize_sequence(v: str) -> str:
    return v.upper().replace(" ", "").replace("\n", "")


class LabeledSequence(BaseModel):
    """
    A training sequence (or fixed-length window) with its label and weight.

    For PSSM training the sequence is a window of the profile length and
    the label is binary. For MILES regression the label is the numeric
    target value of the whole bag.
    """
    model_config = ConfigDict(frozen=True)

    sequence: str = Field(..., description="Amino acid sequence or window")
    label: float = Field(..., description="Class label (0/1) or regression target")
    weight: float = Field(1.0, ge=0, description="Per-instance weight")

    @field_validator("sequence")
    @classmethod
    def validate_sequence(cls, v: str) -> str:
        # Ambiguity codes are kept; scorers skip them.
        return _normalize_sequence(v)

    @property
    def is_positive(self) -> bool:
        """Whether this instance belongs to the positive class."""
        return int(self.label) == Label.POSITIVE

    def __len__(self) -> int:
        return len(self.sequence)


class SequenceRecord(BaseModel):
    """
    An identified sequence submitted for prediction.

    This is the primary input object for the predictor interface.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier")
    sequence: str = Field(..., min_length=1)
    label: Optional[float] = Field(None, description="Known label, if any")
    weight: float = Field(1.0, ge=0)

    @field_validator("sequence")
    @classmethod
    def validate_sequence(cls, v: str) -> str:
        return _normalize_sequence(v)

    @property
    def sequence_length(self) -> int:
        """Length of the sequence."""
        return len(self.sequence)

    def to_labeled(self) -> LabeledSequence:
        """
        Convert to a training instance.

        Raises:
            ValueError: If the record carries no label
        """
        if self.label is None:
            raise ValueError(f"Record '{self.id}' has no label")
        return LabeledSequence(
            sequence=self.sequence, label=self.label, weight=self.weight
        )


class PredictionResult(BaseModel):
    """
    Prediction result for a single sequence from a single predictor.

    Classifiers fill ``probability`` (and ``is_positive``); regressors
    fill ``value``. ``score`` holds the raw, untransformed score.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    sequence_id: str = Field(..., description="Identifier for the input sequence")
    sequence: str = Field(..., description="The input sequence")

    predictor_name: str = Field(..., description="Name of the predictor")
    predictor_version: Optional[str] = None

    score: Optional[float] = Field(None, description="Raw score (log-odds, scale mean)")
    probability: Optional[float] = Field(None, ge=0, le=1)
    value: Optional[float] = Field(None, description="Regression output")
    is_positive: Optional[bool] = None

    raw_output: Optional[dict[str, Any]] = None
    runtime_seconds: Optional[float] = Field(None, ge=0)
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        """Whether the prediction completed successfully."""
        return self.error_message is None
