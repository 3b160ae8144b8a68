"""
Core data structures and utilities for EMAS.

Modules:
    errors: Exception hierarchy
    models: Pydantic models for labelled sequences, records and results
    tables: Alphabets, CTD group maps, substitution matrices, propensity scales
    sequence: Sequence cleaning and window extraction
    parallel: Ordered fan-out over independent sequences
"""

from .errors import (
    ConfigurationError,
    DegenerateTrainingError,
    DimensionMismatchError,
    EmasError,
    NotTrainedError,
)
from .models import Label, LabeledSequence, PredictionResult, SequenceRecord
from .parallel import parallel_map
from .sequence import (
    clean_sequence,
    extract_windows,
    sliding_window,
)
from .tables import (
    AMINO_ACIDS,
    BLOSUM62,
    BLOSUM62_QIJ,
    BLOSUM_ALPHABET,
    BLOSUM_ORDER,
    DEFAULT_GROUP_MAPS,
    STANDARD_ALPHABET,
    Alphabet,
    GroupMap,
    PropensityScale,
    SubstitutionMatrix,
    get_scale,
    list_scales,
)

__all__ = [
    # Errors
    "EmasError",
    "ConfigurationError",
    "DimensionMismatchError",
    "DegenerateTrainingError",
    "NotTrainedError",
    # Models
    "Label",
    "LabeledSequence",
    "SequenceRecord",
    "PredictionResult",
    # Tables
    "AMINO_ACIDS",
    "BLOSUM_ORDER",
    "STANDARD_ALPHABET",
    "BLOSUM_ALPHABET",
    "Alphabet",
    "GroupMap",
    "DEFAULT_GROUP_MAPS",
    "SubstitutionMatrix",
    "BLOSUM62",
    "BLOSUM62_QIJ",
    "PropensityScale",
    "get_scale",
    "list_scales",
    # Sequence utilities
    "clean_sequence",
    "sliding_window",
    "extract_windows",
    "parallel_map",
]
