"""
Alphabet and table registry for emas.

Immutable domain constants shared by every encoder and scorer:

- the 20-letter amino acid alphabet and its index mapping
- physico-chemical group maps used by the CTD encoder
  (hydrophobicity, polarizability, polarity, normalized van der Waals volume)
- the BLOSUM62 substitution matrix, both as integer log-odds scores
  (MILES distance, loaded from Biopython) and as target pair frequencies
  q_ij (PSSM pseudo-counts)
- named amino acid propensity scales

Every table is built once at import time and exposed as a frozen value
object wrapping read-only numpy arrays. Nothing in this module is mutable
after import.

References
----------
- Dubchak et al. (1995) PNAS 92:8700-8704 - CTD group definitions
- Henikoff & Henikoff (1992) PNAS 89:10915-10919 - BLOSUM62
- Parker, Guo & Hodges (1986) Biochemistry 25:5425-5432 - hydrophilicity scale
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

import numpy as np
from Bio.Align import substitution_matrices

from .errors import ConfigurationError


# =============================================================================
# Alphabets
# =============================================================================

# Standard 20 amino acids in alphabetical one-letter order
AMINO_ACIDS = "ACDEFGHIKLMNPQRSTVWY"

# Row/column order used by the published BLOSUM tables
BLOSUM_ORDER = "ARNDCQEGHILKMFPSTWYV"

GROUP_VALUES = ("1", "2", "3")


@dataclass(frozen=True)
class Alphabet:
    """
    Ordered set of valid sequence symbols.

    The position of a symbol in the alphabet is the row/column index used
    by every table of matching dimension.
    """
    symbols: str
    _index: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.symbols:
            raise ConfigurationError("Alphabet must contain at least one symbol")
        if len(set(self.symbols)) != len(self.symbols):
            raise ConfigurationError(f"Alphabet has duplicate symbols: {self.symbols!r}")
        object.__setattr__(
            self, "_index", {s: i for i, s in enumerate(self.symbols)}
        )

    def __len__(self) -> int:
        return len(self.symbols)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._index

    def __iter__(self):
        return iter(self.symbols)

    def index(self, symbol: str) -> int:
        """Index of ``symbol``, or -1 if it is not in the alphabet."""
        return self._index.get(symbol, -1)

    def indices(self, sequence: str) -> np.ndarray:
        """
        Map a sequence to an integer array of alphabet indices.

        Out-of-alphabet symbols map to -1.
        """
        return np.fromiter(
            (self._index.get(s, -1) for s in sequence),
            dtype=np.int64,
            count=len(sequence),
        )

    def filter(self, sequence: str) -> str:
        """Drop every symbol that is not in the alphabet."""
        return "".join(s for s in sequence if s in self._index)


STANDARD_ALPHABET = Alphabet(AMINO_ACIDS)
BLOSUM_ALPHABET = Alphabet(BLOSUM_ORDER)


def _as_alphabet(alphabet: Union[Alphabet, str]) -> Alphabet:
    return alphabet if isinstance(alphabet, Alphabet) else Alphabet(alphabet)


def _readonly(values, dtype=float) -> np.ndarray:
    arr = np.array(values, dtype=dtype)
    arr.setflags(write=False)
    return arr


# =============================================================================
# CTD group maps
# =============================================================================

@dataclass(frozen=True)
class GroupMap:
    """
    Assignment of every alphabet symbol to one of three groups.

    ``groups`` is a string of the digits "1", "2", "3", one per alphabet
    symbol in alphabet order.
    """
    name: str
    groups: str
    alphabet: Alphabet = STANDARD_ALPHABET

    def __post_init__(self):
        if len(self.groups) != len(self.alphabet):
            raise ConfigurationError(
                f"Group map '{self.name}' has {len(self.groups)} entries "
                f"but the alphabet has {len(self.alphabet)} symbols"
            )
        illegal = set(self.groups) - set(GROUP_VALUES)
        if illegal:
            raise ConfigurationError(
                f"Group map '{self.name}' contains illegal group values: {sorted(illegal)}"
            )

    def group_of(self, symbol: str) -> str:
        """Group digit of ``symbol``, or "" if it is not in the alphabet."""
        idx = self.alphabet.index(symbol)
        return self.groups[idx] if idx >= 0 else ""

    def translate(self, sequence: str) -> str:
        """Rewrite a sequence over the {1, 2, 3} alphabet, skipping unknown symbols."""
        return "".join(self.group_of(s) for s in sequence)


# Dubchak groupings over ACDEFGHIKLMNPQRSTVWY
HYDROPHOBICITY = GroupMap("hydrophobicity", "23113223133121122332")
POLARIZABILITY = GroupMap("polarizability", "11123132323212311233")
POLARITY = GroupMap("polarity", "21331231311323322111")
VOLUME = GroupMap("volume", "12123132323222311233")

DEFAULT_GROUP_MAPS = (HYDROPHOBICITY, POLARIZABILITY, POLARITY, VOLUME)


# =============================================================================
# Substitution matrices
# =============================================================================

@dataclass(frozen=True, eq=False)
class SubstitutionMatrix:
    """Square, read-only |A| x |A| matrix of pairwise symbol scores."""
    name: str
    alphabet: Alphabet
    values: np.ndarray

    def __post_init__(self):
        values = np.asarray(self.values, dtype=float)
        n = len(self.alphabet)
        if values.shape != (n, n):
            raise ConfigurationError(
                f"Matrix '{self.name}' has shape {values.shape}, expected ({n}, {n})"
            )
        if values.flags.writeable:
            values = values.copy()
            values.setflags(write=False)
        object.__setattr__(self, "values", values)

    def score(self, a: str, b: str) -> float:
        """Score of the pair (a, b); 0.0 if either symbol is unknown."""
        i, j = self.alphabet.index(a), self.alphabet.index(b)
        if i < 0 or j < 0:
            return 0.0
        return float(self.values[i, j])

    def reindex(self, alphabet: Union[Alphabet, str]) -> SubstitutionMatrix:
        """
        Return the same matrix with rows and columns in another symbol order.

        Raises:
            ConfigurationError: If ``alphabet`` has symbols this matrix lacks
        """
        alphabet = _as_alphabet(alphabet)
        missing = [s for s in alphabet if s not in self.alphabet]
        if missing:
            raise ConfigurationError(
                f"Matrix '{self.name}' has no entries for symbols {missing}"
            )
        order = [self.alphabet.index(s) for s in alphabet]
        return SubstitutionMatrix(
            self.name, alphabet, self.values[np.ix_(order, order)]
        )

    def padded(self) -> np.ndarray:
        """
        Copy of the matrix with an extra all-zero row and column.

        Index -1 (unknown symbol) then addresses the zero padding, so that
        out-of-alphabet symbols contribute nothing to summed scores.
        """
        n = len(self.alphabet)
        out = np.zeros((n + 1, n + 1))
        out[:n, :n] = self.values
        return out


def _load_blosum62() -> SubstitutionMatrix:
    """Reindex Biopython's BLOSUM62 (which also carries B, Z, X and *) into BLOSUM_ORDER."""
    matrix = substitution_matrices.load("BLOSUM62")
    return SubstitutionMatrix("BLOSUM62", BLOSUM_ALPHABET, _readonly(
        [[matrix[a, b] for b in BLOSUM_ORDER] for a in BLOSUM_ORDER]
    ))


# BLOSUM62 log-odds scores (half-bit units), rows/columns in BLOSUM_ORDER
BLOSUM62 = _load_blosum62()

# BLOSUM62 target pair frequencies q_ij (blosum62.qij), rows/columns in AMINO_ACIDS order
BLOSUM62_QIJ = SubstitutionMatrix("BLOSUM62_QIJ", STANDARD_ALPHABET, _readonly([
    [0.0215, 0.0016, 0.0022, 0.003, 0.0016, 0.0058, 0.0011, 0.0032, 0.0033, 0.0044, 0.0013, 0.0019, 0.0022, 0.0019, 0.0023, 0.0063, 0.0037, 0.0051, 0.0004, 0.0013],  # A
    [0.0016, 0.0119, 0.0004, 0.0004, 0.0005, 0.0008, 0.0002, 0.0011, 0.0005, 0.0016, 0.0004, 0.0004, 0.0004, 0.0003, 0.0004, 0.001, 0.0009, 0.0014, 0.0001, 0.0003],  # C
    [0.0022, 0.0004, 0.0213, 0.0049, 0.0008, 0.0025, 0.001, 0.0012, 0.0024, 0.0015, 0.0005, 0.0037, 0.0012, 0.0016, 0.0016, 0.0028, 0.0019, 0.0013, 0.0002, 0.0006],  # D
    [0.003, 0.0004, 0.0049, 0.0161, 0.0009, 0.0019, 0.0014, 0.0012, 0.0041, 0.002, 0.0007, 0.0022, 0.0014, 0.0035, 0.0027, 0.003, 0.002, 0.0017, 0.0003, 0.0009],  # E
    [0.0016, 0.0005, 0.0008, 0.0009, 0.0183, 0.0012, 0.0008, 0.003, 0.0009, 0.0054, 0.0012, 0.0008, 0.0005, 0.0005, 0.0009, 0.0012, 0.0012, 0.0026, 0.0008, 0.0042],  # F
    [0.0058, 0.0008, 0.0025, 0.0019, 0.0012, 0.0378, 0.001, 0.0014, 0.0025, 0.0021, 0.0007, 0.0029, 0.0014, 0.0014, 0.0017, 0.0038, 0.0022, 0.0018, 0.0004, 0.0008],  # G
    [0.0011, 0.0002, 0.001, 0.0014, 0.0008, 0.001, 0.0093, 0.0006, 0.0012, 0.001, 0.0004, 0.0014, 0.0005, 0.001, 0.0012, 0.0011, 0.0007, 0.0006, 0.0002, 0.0015],  # H
    [0.0032, 0.0011, 0.0012, 0.0012, 0.003, 0.0014, 0.0006, 0.0184, 0.0016, 0.0114, 0.0025, 0.001, 0.001, 0.0009, 0.0012, 0.0017, 0.0027, 0.012, 0.0004, 0.0014],  # I
    [0.0033, 0.0005, 0.0024, 0.0041, 0.0009, 0.0025, 0.0012, 0.0016, 0.0161, 0.0025, 0.0009, 0.0024, 0.0016, 0.0031, 0.0062, 0.0031, 0.0023, 0.0019, 0.0003, 0.001],  # K
    [0.0044, 0.0016, 0.0015, 0.002, 0.0054, 0.0021, 0.001, 0.0114, 0.0025, 0.0371, 0.0049, 0.0014, 0.0014, 0.0016, 0.0024, 0.0024, 0.0033, 0.0095, 0.0007, 0.0022],  # L
    [0.0013, 0.0004, 0.0005, 0.0007, 0.0012, 0.0007, 0.0004, 0.0025, 0.0009, 0.0049, 0.004, 0.0005, 0.0004, 0.0007, 0.0008, 0.0009, 0.001, 0.0023, 0.0002, 0.0006],  # M
    [0.0019, 0.0004, 0.0037, 0.0022, 0.0008, 0.0029, 0.0014, 0.001, 0.0024, 0.0014, 0.0005, 0.0141, 0.0009, 0.0015, 0.002, 0.0031, 0.0022, 0.0012, 0.0002, 0.0007],  # N
    [0.0022, 0.0004, 0.0012, 0.0014, 0.0005, 0.0014, 0.0005, 0.001, 0.0016, 0.0014, 0.0004, 0.0009, 0.0191, 0.0008, 0.001, 0.0017, 0.0014, 0.0012, 0.0001, 0.0005],  # P
    [0.0019, 0.0003, 0.0016, 0.0035, 0.0005, 0.0014, 0.001, 0.0009, 0.0031, 0.0016, 0.0007, 0.0015, 0.0008, 0.0073, 0.0025, 0.0019, 0.0014, 0.0012, 0.0002, 0.0007],  # Q
    [0.0023, 0.0004, 0.0016, 0.0027, 0.0009, 0.0017, 0.0012, 0.0012, 0.0062, 0.0024, 0.0008, 0.002, 0.001, 0.0025, 0.0178, 0.0023, 0.0018, 0.0016, 0.0003, 0.0009],  # R
    [0.0063, 0.001, 0.0028, 0.003, 0.0012, 0.0038, 0.0011, 0.0017, 0.0031, 0.0024, 0.0009, 0.0031, 0.0017, 0.0019, 0.0023, 0.0126, 0.0047, 0.0024, 0.0003, 0.001],  # S
    [0.0037, 0.0009, 0.0019, 0.002, 0.0012, 0.0022, 0.0007, 0.0027, 0.0023, 0.0033, 0.001, 0.0022, 0.0014, 0.0014, 0.0018, 0.0047, 0.0125, 0.0036, 0.0003, 0.0009],  # T
    [0.0051, 0.0014, 0.0013, 0.0017, 0.0026, 0.0018, 0.0006, 0.012, 0.0019, 0.0095, 0.0023, 0.0012, 0.0012, 0.0012, 0.0016, 0.0024, 0.0036, 0.0196, 0.0004, 0.0015],  # V
    [0.0004, 0.0001, 0.0002, 0.0003, 0.0008, 0.0004, 0.0002, 0.0004, 0.0003, 0.0007, 0.0002, 0.0002, 0.0001, 0.0002, 0.0003, 0.0003, 0.0003, 0.0004, 0.0065, 0.0009],  # W
    [0.0013, 0.0003, 0.0006, 0.0009, 0.0042, 0.0008, 0.0015, 0.0014, 0.001, 0.0022, 0.0006, 0.0007, 0.0005, 0.0007, 0.0009, 0.001, 0.0009, 0.0015, 0.0009, 0.0102],  # Y
]))


# =============================================================================
# Propensity scales
# =============================================================================

@dataclass(frozen=True, eq=False)
class PropensityScale:
    """Per-symbol numeric property values over an alphabet."""
    name: str
    alphabet: Alphabet
    values: np.ndarray
    description: str = ""

    def __post_init__(self):
        values = np.asarray(self.values, dtype=float).ravel()
        if values.shape[0] != len(self.alphabet):
            raise ConfigurationError(
                f"Size of the propensity scale '{self.name}' ({values.shape[0]}) "
                f"does not match the alphabet size ({len(self.alphabet)})"
            )
        if values.flags.writeable:
            values = values.copy()
            values.setflags(write=False)
        object.__setattr__(self, "values", values)

    @classmethod
    def from_string(
        cls,
        name: str,
        text: str,
        alphabet: Union[Alphabet, str] = BLOSUM_ORDER,
    ) -> PropensityScale:
        """
        Parse a comma/whitespace separated list of values.

        Raises:
            ConfigurationError: If a token is not numeric or the count is wrong
        """
        tokens = text.replace(",", " ").split()
        try:
            values = [float(t) for t in tokens]
        except ValueError as e:
            raise ConfigurationError(f"Malformed propensity scale '{name}': {e}") from e
        return cls(name, _as_alphabet(alphabet), np.array(values))

    @classmethod
    def from_mapping(cls, name: str, mapping: dict[str, float], description: str = "") -> PropensityScale:
        """Build a scale over the sorted symbols of ``mapping``."""
        alphabet = Alphabet("".join(sorted(mapping)))
        return cls(name, alphabet, np.array([mapping[s] for s in alphabet]), description)

    def value_of(self, symbol: str) -> float:
        """Scale value of ``symbol``; 0.0 if unknown."""
        idx = self.alphabet.index(symbol)
        return float(self.values[idx]) if idx >= 0 else 0.0

    def as_dict(self) -> dict[str, float]:
        return {s: float(v) for s, v in zip(self.alphabet, self.values)}


# Parker hydrophilicity, in BLOSUM_ORDER
PARKER = PropensityScale.from_string(
    "parker",
    "2.1,4.2,7.0,10.0,1.4,6.0,7.8,5.7,2.1,-8.0,-9.2,5.7,-4.2,-9.2,2.1,6.5,5.2,-10.0,-1.9,-3.7",
)

KYTE_DOOLITTLE = PropensityScale.from_mapping("kyte_doolittle", {
    'A': 1.8, 'R': -4.5, 'N': -3.5, 'D': -3.5, 'C': 2.5,
    'Q': -3.5, 'E': -3.5, 'G': -0.4, 'H': -3.2, 'I': 4.5,
    'L': 3.8, 'K': -3.9, 'M': 1.9, 'F': 2.8, 'P': -1.6,
    'S': -0.8, 'T': -0.7, 'W': -0.9, 'Y': -1.3, 'V': 4.2,
}, "Kyte-Doolittle hydropathy")

EISENBERG = PropensityScale.from_mapping("eisenberg", {
    'A': 0.62, 'R': -2.53, 'N': -0.78, 'D': -0.90, 'C': 0.29,
    'Q': -0.85, 'E': -0.74, 'G': 0.48, 'H': -0.40, 'I': 1.38,
    'L': 1.06, 'K': -1.50, 'M': 0.64, 'F': 1.19, 'P': 0.12,
    'S': -0.18, 'T': -0.05, 'W': 0.81, 'Y': 0.26, 'V': 1.08,
}, "Eisenberg consensus hydrophobicity")

# Values > 1.0 indicate beta-sheet preference
BETA_PROPENSITY_CF = PropensityScale.from_mapping("chou_fasman_beta", {
    'A': 0.83, 'R': 0.93, 'N': 0.89, 'D': 0.54, 'C': 1.19,
    'Q': 1.10, 'E': 0.37, 'G': 0.75, 'H': 0.87, 'I': 1.60,
    'L': 1.30, 'K': 0.74, 'M': 1.05, 'F': 1.38, 'P': 0.55,
    'S': 0.75, 'T': 1.19, 'W': 1.37, 'Y': 1.47, 'V': 1.70,
}, "Chou-Fasman beta-sheet propensity")

_SCALE_REGISTRY: dict[str, PropensityScale] = {
    scale.name: scale
    for scale in (PARKER, KYTE_DOOLITTLE, EISENBERG, BETA_PROPENSITY_CF)
}


def get_scale(name: str) -> PropensityScale:
    """
    Look up a named propensity scale.

    Raises:
        ConfigurationError: If no scale is registered under ``name``
    """
    key = name.lower()
    if key not in _SCALE_REGISTRY:
        available = ", ".join(sorted(_SCALE_REGISTRY))
        raise ConfigurationError(f"Unknown propensity scale '{name}'. Available: {available}")
    return _SCALE_REGISTRY[key]


def list_scales() -> list[str]:
    """Names of all registered propensity scales."""
    return sorted(_SCALE_REGISTRY)
