"""
EMAS: sequence encoders and scorers for epitope and amyloid prediction.

This package turns variable-length protein sequences into numbers that
classifiers and regressors can use, and provides the self-contained
scorers that work directly on residue windows.

Short linear determinants such as B-cell epitopes or amyloid
aggregation-prone segments are recognised largely from local sequence
signals: which residues occur, how their physico-chemical classes
alternate, and how residue preferences vary along a window. The
components below capture these signals in complementary ways.

Key components:
    - core: Alphabets, group maps, substitution matrices and scales;
      data models; error types
    - features: Composition-Transition-Distribution (CTD) encoding
    - predictors: PSSM profile scorer, propensity-scale scorer, MILES
      multiple-instance regressor, balanced classifier wrapper

Basic usage:
    >>> from emas import CTDEncoder, LabeledSequence, train_pssm
    >>> CTDEncoder().encode("AAAAACCCCC").shape
    (104,)
    >>> profile = train_pssm(
    ...     [LabeledSequence(sequence="AAA", label=1)] * 3,
    ...     use_negative_background=False,
    ... )
    >>> profile.score("AAA") > profile.score("CCC")
    True
"""

__version__ = "0.1.0"

from .core.errors import (
    ConfigurationError,
    DegenerateTrainingError,
    DimensionMismatchError,
    EmasError,
    NotTrainedError,
)
from .core.models import Label, LabeledSequence, PredictionResult, SequenceRecord
from .core.tables import (
    BLOSUM62,
    BLOSUM62_QIJ,
    DEFAULT_GROUP_MAPS,
    Alphabet,
    GroupMap,
    PropensityScale,
    SubstitutionMatrix,
    get_scale,
    list_scales,
)
from .features.ctd import CTDConfig, CTDEncoder, encode_ctd
from .predictors.base import (
    BasePredictor,
    PredictorConfig,
    PredictorType,
    TrainablePredictor,
    get_predictor,
    list_predictors,
)
from .predictors.balanced import BalancedClassifier, BalancedConfig
from .predictors.miles import (
    MILESConfig,
    MILESEmbedder,
    MILESRegressor,
    ReferenceWindowSet,
    embed_miles,
    train_miles,
)
from .predictors.propensity import PropensityConfig, PropensityScalePredictor
from .predictors.pssm import PSSMConfig, PSSMPredictor, PSSMProfile, score_pssm, train_pssm

__all__ = [
    # Version
    "__version__",
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
    "Alphabet",
    "GroupMap",
    "SubstitutionMatrix",
    "PropensityScale",
    "BLOSUM62",
    "BLOSUM62_QIJ",
    "DEFAULT_GROUP_MAPS",
    "get_scale",
    "list_scales",
    # CTD
    "CTDConfig",
    "CTDEncoder",
    "encode_ctd",
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
    "train_miles",
    "embed_miles",
    # Propensity
    "PropensityConfig",
    "PropensityScalePredictor",
    # Balanced
    "BalancedConfig",
    "BalancedClassifier",
    # Predictor system
    "BasePredictor",
    "TrainablePredictor",
    "PredictorConfig",
    "PredictorType",
    "get_predictor",
    "list_predictors",
]
