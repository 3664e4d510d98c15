"""Pytest configuration and fixtures for variant-normalizer tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from fixtures.vcf_generator import (  # noqa: E402
    SyntheticVariant,
    VCFGenerator,
    make_malformed_genotype_vcf_file,
    make_mnv_vcf_file,
    make_multiallelic_vcf_file,
    make_structural_vcf_file,
)

from variant_normalizer.config import NormalizerConfig  # noqa: E402
from variant_normalizer.models import StudyEntry, Variant  # noqa: E402
from variant_normalizer.normalizer import VariantNormalizer  # noqa: E402


def make_variant(
    chrom: str,
    start: int,
    reference: str,
    alternates: list[str],
    end: int | None = None,
    format_fields: list[str] | None = None,
    samples: dict[str, list[str]] | None = None,
    attributes: dict[str, str] | None = None,
) -> Variant:
    """Build a single-study Variant the way the VCF adapter would."""
    if end is None:
        end = start + len(reference) - 1
    return Variant(
        chromosome=chrom,
        start=start,
        end=end,
        reference=reference,
        alternates=list(alternates),
        studies=[StudyEntry(
            study_id="test",
            format=list(format_fields or []),
            samples={k: list(v) for k, v in (samples or {}).items()},
            file_attributes=dict(attributes or {}),
        )],
    )


class SequenceGenome:
    """In-memory reference genome over one contiguous sequence starting at position 1."""

    def __init__(self, sequence: str):
        self.sequence = sequence

    def fetch(self, chrom: str, start: int, end: int) -> str:
        """Fetch reference sequence for a region (0-based coordinates)."""
        return self.sequence[start:end]


@pytest.fixture
def normalizer() -> VariantNormalizer:
    """Normalizer with default configuration."""
    return VariantNormalizer()


@pytest.fixture
def normalizer_factory():
    """Factory for normalizers with configuration overrides."""

    def _factory(**kwargs):
        return VariantNormalizer(NormalizerConfig(**kwargs))

    return _factory


@pytest.fixture
def vcf_generator():
    """Provide VCFGenerator class for tests."""
    return VCFGenerator


@pytest.fixture
def synthetic_variant_factory():
    """Factory for creating SyntheticVariant instances."""

    def _factory(**kwargs):
        defaults = {
            "chrom": "1",
            "pos": 100,
            "ref": "A",
            "alt": ["G"],
        }
        defaults.update(kwargs)
        return SyntheticVariant(**defaults)

    return _factory


@pytest.fixture
def multiallelic_vcf_file():
    """Generate a VCF file with a multi-allelic site."""
    path = make_multiallelic_vcf_file()
    yield path
    if path.exists():
        path.unlink()


@pytest.fixture
def mnv_vcf_file():
    """Generate a VCF file with an MNV record."""
    path = make_mnv_vcf_file()
    yield path
    if path.exists():
        path.unlink()


@pytest.fixture
def structural_vcf_file():
    """Generate a VCF file with symbolic structural variants."""
    path = make_structural_vcf_file()
    yield path
    if path.exists():
        path.unlink()


@pytest.fixture
def malformed_genotype_vcf_file():
    """Generate a VCF file with one record that cannot be normalized."""
    path = make_malformed_genotype_vcf_file()
    yield path
    if path.exists():
        path.unlink()
