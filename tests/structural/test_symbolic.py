"""Tests for symbolic allele normalization."""

import pytest

from variant_normalizer.models import StructuralVariantInfo, StructuralVariantType
from variant_normalizer.structural import (
    copy_number_type,
    normalize_symbolic,
    parse_confidence_interval,
    shared_copy_number,
)


class TestHelpers:
    """Tests for attribute parsing helpers."""

    def test_confidence_interval(self):
        assert parse_confidence_interval("-14,50", 100) == (86, 150)

    @pytest.mark.parametrize("value", [None, "abc", "1", "1,2,3", "a,b"])
    def test_unparsable_confidence_interval(self, value):
        assert parse_confidence_interval(value, 100) == (None, None)

    @pytest.mark.parametrize("copy_number,expected", [
        (0, StructuralVariantType.COPY_NUMBER_LOSS),
        (1, StructuralVariantType.COPY_NUMBER_LOSS),
        (2, None),
        (3, StructuralVariantType.COPY_NUMBER_GAIN),
        (None, None),
    ])
    def test_copy_number_type(self, copy_number, expected):
        assert copy_number_type(copy_number) == expected

    def test_copy_number_type_haploid_baseline(self):
        assert copy_number_type(2, reference_ploidy=1) == StructuralVariantType.COPY_NUMBER_GAIN

    @pytest.mark.parametrize("values,expected", [
        (["3", "3", "."], 3),
        (["3", "2"], None),
        ([], None),
        (["x"], None),
    ])
    def test_shared_copy_number(self, values, expected):
        assert shared_copy_number(values) == expected


class TestNormalizeSymbolic:
    """Tests for canonical symbolic alleles."""

    def test_copy_number_loss_with_intervals(self):
        key = normalize_symbolic(
            "1", 100, 200, "C", "<CN0>",
            attributes={"CIPOS": "-14,50", "CIEND": "-50,11"},
        )

        assert (key.start, key.end, key.reference, key.alternate) == (101, 200, "", "<CN0>")
        assert key.structural == StructuralVariantInfo(
            ci_start_left=86,
            ci_start_right=150,
            ci_end_left=150,
            ci_end_right=211,
            copy_number=0,
            structural_type=StructuralVariantType.COPY_NUMBER_LOSS,
        )

    def test_cnv_takes_shared_sample_copy_number(self):
        key = normalize_symbolic("1", 100, 200, "C", "<CNV>", sample_copy_numbers=["3"])

        assert key.alternate == "<CN3>"
        assert key.start == 101
        assert key.reference == ""
        assert key.structural.copy_number == 3
        assert key.structural.structural_type == StructuralVariantType.COPY_NUMBER_GAIN

    def test_cnv_prefers_info_copy_number(self):
        key = normalize_symbolic(
            "1", 100, 200, "C", "<CNV>", attributes={"CN": "1"}, sample_copy_numbers=["3"]
        )
        assert key.alternate == "<CN1>"
        assert key.structural.structural_type == StructuralVariantType.COPY_NUMBER_LOSS

    def test_cnv_with_disagreeing_samples(self):
        key = normalize_symbolic("1", 100, 200, "C", "<CNV>", sample_copy_numbers=["3", "1"])
        assert key.alternate == "<CNV>"
        assert key.structural.copy_number is None
        assert key.structural.structural_type is None

    def test_custom_copy_number_field(self):
        key = normalize_symbolic(
            "1", 100, 200, "C", "<CNV>", attributes={"TCN": "4"}, copy_number_field="TCN"
        )
        assert key.alternate == "<CN4>"

    def test_copy_neutral(self):
        key = normalize_symbolic("1", 100, 200, "C", "<CN2>")
        assert key.structural.copy_number == 2
        assert key.structural.structural_type is None

    def test_deletion(self):
        key = normalize_symbolic("1", 100, 200, "N", "<DEL>")

        assert (key.start, key.end, key.reference, key.alternate) == (101, 200, "", "<DEL>")
        assert key.structural == StructuralVariantInfo()

    def test_multi_base_reference_kept(self):
        key = normalize_symbolic("1", 100, 200, "AC", "<DEL>")
        assert (key.start, key.reference) == (100, "AC")

    def test_insertion_sequence(self):
        key = normalize_symbolic("1", 100, 100, "N", "<INS>", attributes={"SVINSSEQ": "acgtt"})

        assert (key.start, key.end, key.reference, key.alternate) == (101, 100, "", "ACGTT")
        assert key.structural == StructuralVariantInfo()

    def test_insertion_flanking_sequences(self):
        key = normalize_symbolic(
            "1", 100, 100, "N", "<INS>",
            attributes={"LEFT_SVINSSEQ": "ACG", "RIGHT_SVINSSEQ": "TTA"},
        )

        assert key.alternate == "<INS>"
        assert key.structural.left_inserted_sequence == "ACG"
        assert key.structural.right_inserted_sequence == "TTA"

    def test_tandem_duplication(self):
        key = normalize_symbolic("1", 100, 300, "A", "<DUP:TANDEM>")
        assert key.structural.structural_type == StructuralVariantType.TANDEM_DUPLICATION

    @pytest.mark.parametrize("alternate", ["<NON_REF>", "<*>"])
    def test_placeholder(self, alternate):
        key = normalize_symbolic("1", 100, 100, "A", alternate, allele_index=1)

        assert (key.start, key.end, key.reference, key.alternate) == (100, 100, "A", "<*>")
        assert key.allele_index == 1
        assert key.structural is None

    def test_single_breakend(self):
        key = normalize_symbolic("1", 100, 100, "A", "A.")

        assert key.alternate == "A."
        assert key.structural.breakend.mate_chromosome is None
        assert key.structural.breakend.orientation is None

    def test_bracket_breakend_delegated(self):
        key = normalize_symbolic(
            "1", 100, 100, "A", "A[chr9:10[", attributes={"CIPOS": "-5,5"}
        )

        assert key.alternate == ".[9:10["
        assert key.start == 101
        assert key.structural.ci_start_left == 95
        assert key.structural.breakend.mate_position == 10
