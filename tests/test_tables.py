"""
Tests for the alphabet and table registry.

Every encoder and scorer indexes these tables by alphabet position, so
symbol order, value placement and read-only behaviour are checked
directly against published values.
"""

import numpy as np
import pytest

from emas.core.errors import ConfigurationError
from emas.core.tables import (
    AMINO_ACIDS,
    BETA_PROPENSITY_CF,
    BLOSUM62,
    BLOSUM62_QIJ,
    BLOSUM_ALPHABET,
    BLOSUM_ORDER,
    DEFAULT_GROUP_MAPS,
    HYDROPHOBICITY,
    KYTE_DOOLITTLE,
    PARKER,
    STANDARD_ALPHABET,
    Alphabet,
    GroupMap,
    PropensityScale,
    get_scale,
    list_scales,
)


class TestAlphabet:
    """Tests for the ordered symbol set."""

    def test_standard_order(self):
        assert STANDARD_ALPHABET.symbols == "ACDEFGHIKLMNPQRSTVWY"
        assert BLOSUM_ALPHABET.symbols == "ARNDCQEGHILKMFPSTWYV"
        assert len(STANDARD_ALPHABET) == 20

    def test_index_of_unknown_symbol(self):
        assert STANDARD_ALPHABET.index("A") == 0
        assert STANDARD_ALPHABET.index("Y") == 19
        assert STANDARD_ALPHABET.index("X") == -1

    def test_indices_mark_unknown(self):
        idx = STANDARD_ALPHABET.indices("AXC")
        assert idx.tolist() == [0, -1, 1]
        assert idx.dtype == np.int64

    def test_membership_and_filter(self):
        assert "W" in STANDARD_ALPHABET
        assert "B" not in STANDARD_ALPHABET
        assert STANDARD_ALPHABET.filter("KLVXFFB") == "KLVFF"

    def test_duplicate_symbols_rejected(self):
        with pytest.raises(ConfigurationError):
            Alphabet("AAC")

    def test_empty_alphabet_rejected(self):
        with pytest.raises(ConfigurationError):
            Alphabet("")


class TestGroupMap:
    """Tests for the three-class residue groupings used by CTD."""

    def test_registered_maps(self):
        names = [gm.name for gm in DEFAULT_GROUP_MAPS]
        assert names == ["hydrophobicity", "polarizability", "polarity", "volume"]
        for gm in DEFAULT_GROUP_MAPS:
            assert len(gm.groups) == 20

    def test_hydrophobicity_groups(self):
        # Polar R,K,E,D,Q,N -> 1; neutral -> 2; hydrophobic C,L,V,I,M,F,W -> 3
        assert HYDROPHOBICITY.group_of("R") == "1"
        assert HYDROPHOBICITY.group_of("A") == "2"
        assert HYDROPHOBICITY.group_of("C") == "3"
        assert HYDROPHOBICITY.group_of("X") == ""

    def test_translate_skips_unknown(self):
        assert HYDROPHOBICITY.translate("AAAAACCCCC") == "2222233333"
        assert HYDROPHOBICITY.translate("AXC") == "23"

    def test_length_mismatch_rejected(self):
        with pytest.raises(ConfigurationError):
            GroupMap("short", "123")

    def test_illegal_group_value_rejected(self):
        with pytest.raises(ConfigurationError):
            GroupMap("bad", "4" * 20)


class TestSubstitutionMatrix:
    """Tests for BLOSUM62 log-odds and pair probabilities."""

    def test_blosum62_known_values(self):
        assert BLOSUM62.score("A", "A") == 4
        assert BLOSUM62.score("W", "W") == 11
        assert BLOSUM62.score("C", "C") == 9
        assert BLOSUM62.score("A", "D") == -2
        assert BLOSUM62.score("W", "C") == -2

    def test_blosum62_symmetric(self):
        assert np.array_equal(BLOSUM62.values, BLOSUM62.values.T)

    def test_blosum62_matches_biopython(self):
        from Bio.Align import substitution_matrices

        reference = substitution_matrices.load("BLOSUM62")
        assert BLOSUM62.values.shape == (20, 20)
        for i, a in enumerate(BLOSUM_ORDER):
            for j, b in enumerate(BLOSUM_ORDER):
                assert BLOSUM62.values[i, j] == reference[a, b]

    def test_blosum62_drops_ambiguity_codes(self):
        # Biopython's matrix also scores B, Z, X and *
        assert BLOSUM62.alphabet.symbols == BLOSUM_ORDER
        assert BLOSUM62.score("B", "B") == 0.0
        assert BLOSUM62.score("*", "A") == 0.0

    def test_unknown_pair_scores_zero(self):
        assert BLOSUM62.score("A", "X") == 0.0

    def test_qij_indexed_by_one_alphabet(self):
        q = BLOSUM62_QIJ.values
        assert BLOSUM62_QIJ.alphabet.symbols == AMINO_ACIDS
        assert np.allclose(q, q.T)
        assert np.all(q > 0)
        w = BLOSUM62_QIJ.alphabet.index("W")
        assert q[w].argmax() == w

    def test_reindex_preserves_scores(self):
        reordered = BLOSUM62.reindex(STANDARD_ALPHABET)
        assert reordered.alphabet.symbols == AMINO_ACIDS
        for a in "ACWY":
            for b in "DKLV":
                assert reordered.score(a, b) == BLOSUM62.score(a, b)

    def test_reindex_missing_symbol(self):
        with pytest.raises(ConfigurationError):
            BLOSUM62.reindex("ACDX")

    def test_padded_adds_zero_row(self):
        padded = BLOSUM62.padded()
        assert padded.shape == (21, 21)
        assert np.all(padded[-1] == 0)
        assert np.all(padded[:, -1] == 0)

    def test_values_read_only(self):
        with pytest.raises(ValueError):
            BLOSUM62.values[0, 0] = 100


class TestPropensityScales:
    """Tests for the named propensity scales."""

    def test_parker_in_blosum_order(self):
        assert PARKER.alphabet.symbols == BLOSUM_ORDER
        assert PARKER.value_of("A") == pytest.approx(2.1)
        assert PARKER.value_of("D") == pytest.approx(10.0)
        assert PARKER.value_of("W") == pytest.approx(-10.0)
        assert PARKER.value_of("V") == pytest.approx(-3.7)

    def test_unknown_symbol_value(self):
        assert KYTE_DOOLITTLE.value_of("X") == 0.0

    def test_beta_propensity_preference(self):
        # V and I are strong beta formers, E and P are breakers
        assert BETA_PROPENSITY_CF.value_of("V") > 1.0
        assert BETA_PROPENSITY_CF.value_of("E") < 1.0

    def test_registry_lookup(self):
        assert get_scale("parker") is PARKER
        assert get_scale("Kyte_Doolittle") is KYTE_DOOLITTLE
        assert set(list_scales()) == {
            "parker", "kyte_doolittle", "eisenberg", "chou_fasman_beta",
        }

    def test_unknown_scale(self):
        with pytest.raises(ConfigurationError):
            get_scale("no_such_scale")

    def test_from_string_count_mismatch(self):
        with pytest.raises(ConfigurationError):
            PropensityScale.from_string("short", "1.0, 2.0")

    def test_from_string_malformed_value(self):
        with pytest.raises(ConfigurationError):
            PropensityScale.from_string("bad", "1.0, abc", alphabet="AC")

    def test_as_dict(self):
        scale = PropensityScale.from_string("two", "1.5 -0.5", alphabet="AC")
        assert scale.as_dict() == {"A": 1.5, "C": -0.5}
