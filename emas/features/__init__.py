"""
Fixed-length feature encodings of protein sequences.

The CTD encoding summarises residue classes along a sequence (which
classes occur, how often adjacent residues switch class, and where along
the sequence each class is found) as a 104-value vector for downstream
learners.
"""

from .ctd import (
    CTDConfig,
    CTDEncoder,
    amino_acid_composition,
    encode_ctd,
    encode_group_string,
    get_ctd_feature_names,
)

__all__ = [
    "CTDConfig",
    "CTDEncoder",
    "amino_acid_composition",
    "encode_ctd",
    "encode_group_string",
    "get_ctd_feature_names",
]
