"""
Sequence scorers and learners.

Predictor Categories:

**Profile predictors**
PSSM: a position-specific log-odds matrix learned from aligned positive
windows, with substitution-matrix pseudo-counts for small training sets.

**Scale predictors**
PropensityScale: mean of a per-residue property scale over a window.
Nothing is learned beyond the choice of scale.

**Multiple-instance predictors**
MILES: each sequence is a bag of 9-mers, embedded as minimum BLOSUM62
distances to a reference set of training 9-mers and passed to a
pluggable regressor.

**Meta classifiers**
BalancedClassifier: trains any classifier on a class-balanced subset.

Submodules:
    base: Abstract base classes and predictor registry
"""

from .base import (
    BaseLearner,
    BasePredictor,
    PredictorCapability,
    PredictorConfig,
    PredictorType,
    TrainablePredictor,
    get_predictor,
    list_predictors,
    register_predictor,
)

# Import concrete predictors to register them
from .pssm import PSSMConfig, PSSMPredictor, PSSMProfile, score_pssm, train_pssm
from .miles import (
    EmbeddedDataset,
    MILESConfig,
    MILESEmbedder,
    MILESRegressor,
    ReferenceWindowSet,
    embed_miles,
    extract_reference_windows,
    train_miles,
    window_distance,
)
from .propensity import PropensityConfig, PropensityScalePredictor
from .balanced import BalancedClassifier, BalancedConfig, balanced_indices

__all__ = [
    # Framework
    "BaseLearner",
    "BasePredictor",
    "TrainablePredictor",
    "PredictorCapability",
    "PredictorConfig",
    "PredictorType",
    "get_predictor",
    "list_predictors",
    "register_predictor",
    # PSSM
    "PSSMConfig",
    "PSSMProfile",
    "PSSMPredictor",
    "train_pssm",
    "score_pssm",
    # MILES
    "MILESConfig",
    "MILESEmbedder",
    "MILESRegressor",
    "ReferenceWindowSet",
    "EmbeddedDataset",
    "extract_reference_windows",
    "train_miles",
    "embed_miles",
    "window_distance",
    # Propensity
    "PropensityConfig",
    "PropensityScalePredictor",
    # Balanced
    "BalancedConfig",
    "BalancedClassifier",
    "balanced_indices",
]
