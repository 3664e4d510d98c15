"""Genotype rewriting for split records.

A record with N alternates has alleles 0..N (0 = reference). A split record
has its own, smaller allele space: 0 is still the reference, 1 is the
fragment's alternate and 2.. are its secondary alternates in original order.
:class:`AlleleMap` holds both directions of that mapping and every sample
field indexed by allele is rewritten through it:

- GT: each allele index is mapped forward, separators and missing alleles kept
- Number=G arrays (GL, PL, GP): one value per unordered genotype, reordered
- Number=R arrays (AD): one value per allele, reordered

Genotypes of ploidy p over m alleles are enumerated in VCF (colex) order; the
multiset a1 <= a2 <= ... <= ap has index sum(C(a_i + i - 1, i)) for i = 1..p.
For diploids this is the familiar k*(k+1)/2 + j.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from itertools import combinations_with_replacement
from math import comb

from ..errors import NonStandardCompliantSampleField

GENOTYPE_FIELD = "GT"
MISSING = "."

_SEPARATOR_PATTERN = re.compile(r"([/|])")
_MAX_PLOIDY = 64


@dataclass(frozen=True)
class AlleleMap:
    """Original allele indices <-> indices of one split record."""

    original_allele_count: int
    forward: Mapping[int, int]
    inverse: tuple[int, ...]

    @property
    def target_allele_count(self) -> int:
        return len(self.inverse)

    @property
    def is_identity(self) -> bool:
        return (
            self.target_allele_count == self.original_allele_count
            and all(i == a for i, a in enumerate(self.inverse))
        )

    @classmethod
    def for_split(
        cls,
        original_allele_count: int,
        primary: Sequence[int],
        secondary: Sequence[int],
    ) -> "AlleleMap":
        """
        Build the map for a fragment.

        Args:
            original_allele_count: Reference plus all original alternates
            primary: Original indices that become allele 1 (duplicates merge)
            secondary: Original indices kept as secondary alternates, in order
        """
        forward = {0: 0}
        for index in primary:
            forward[index] = 1
        for rank, index in enumerate(secondary):
            forward[index] = 2 + rank
        inverse = (0, primary[0], *secondary)
        return cls(original_allele_count, forward, inverse)


@dataclass(frozen=True)
class Genotype:
    """A GT value split into allele indices and the separators between them."""

    alleles: tuple[int | None, ...]
    separators: tuple[str, ...]

    @classmethod
    def parse(
        cls,
        value: str,
        allele_count: int,
        sample_id: str | None = None,
        alleles: Sequence[str] | None = None,
    ) -> "Genotype":
        """
        Parse a GT string such as "0/1", "1|2", "./." or "1".

        With the record's alleles (reference first) given, a token spelling
        one of them, e.g. "A" on an A/T record, reads as that allele's index.

        Raises:
            NonStandardCompliantSampleField: On non-numeric tokens or allele
                indices outside the record
        """
        parts = _SEPARATOR_PATTERN.split(value)
        tokens, separators = parts[::2], parts[1::2]

        indices = []
        for token in tokens:
            if token == MISSING:
                indices.append(None)
                continue
            if token and not token.isdigit() and token in (alleles or ()):
                indices.append(list(alleles).index(token))
                continue
            if not token.isdigit():
                raise NonStandardCompliantSampleField(
                    sample_id, GENOTYPE_FIELD, value, f"allele '{token}' is not an index"
                )
            index = int(token)
            if index >= allele_count:
                raise NonStandardCompliantSampleField(
                    sample_id, GENOTYPE_FIELD, value,
                    f"allele {index} out of range for {allele_count} alleles",
                )
            indices.append(index)

        return cls(tuple(indices), tuple(separators))

    @property
    def ploidy(self) -> int:
        return len(self.alleles)

    @property
    def phased(self) -> bool:
        return "|" in self.separators

    @property
    def is_called(self) -> bool:
        return any(a is not None for a in self.alleles)

    def remap(self, forward: Mapping[int, int]) -> "Genotype":
        return Genotype(
            tuple(None if a is None else forward[a] for a in self.alleles),
            self.separators,
        )

    def to_reference(self) -> "Genotype":
        """Every called allele becomes the reference allele."""
        return Genotype(tuple(None if a is None else 0 for a in self.alleles), self.separators)

    def normalized(self) -> "Genotype":
        """Sort allele indices of a fully called unphased genotype."""
        if self.phased or not all(a is not None for a in self.alleles):
            return self
        return Genotype(tuple(sorted(self.alleles)), self.separators)

    def __str__(self) -> str:
        parts = [MISSING if a is None else str(a) for a in self.alleles]
        out = parts[0]
        for separator, part in zip(self.separators, parts[1:], strict=True):
            out += separator + part
        return out


def genotype_count(ploidy: int, allele_count: int) -> int:
    """Number of unordered genotypes: C(m + p - 1, p)."""
    return comb(allele_count + ploidy - 1, ploidy)


def genotype_index(alleles: Iterable[int]) -> int:
    """Position of an unordered genotype in VCF genotype order."""
    return sum(comb(a + i, i + 1) for i, a in enumerate(sorted(alleles)))


@lru_cache(maxsize=256)
def enumerate_genotypes(ploidy: int, allele_count: int) -> tuple[tuple[int, ...], ...]:
    """All unordered genotypes in VCF genotype order."""
    genotypes = combinations_with_replacement(range(allele_count), ploidy)
    return tuple(sorted(genotypes, key=lambda g: g[::-1]))


@lru_cache(maxsize=1024)
def genotype_reordering_map(
    ploidy: int,
    original_allele_count: int,
    target_allele_count: int,
    inverse: tuple[int, ...],
) -> tuple[int, ...]:
    """
    For every target genotype, the index of the original genotype it came from.

    Args:
        ploidy: Allele copies per sample
        original_allele_count: Alleles of the original record
        target_allele_count: Alleles of the split record
        inverse: Target allele index -> original allele index

    Returns:
        Tuple of original genotype indices, one per target genotype
    """
    if len(inverse) != target_allele_count:
        raise ValueError(f"Expected {target_allele_count} inverse entries, got {len(inverse)}")
    if any(a < 0 or a >= original_allele_count for a in inverse):
        raise ValueError(f"Inverse map {inverse} outside {original_allele_count} alleles")

    return tuple(
        genotype_index(inverse[a] for a in genotype)
        for genotype in enumerate_genotypes(ploidy, target_allele_count)
    )


def infer_ploidy(value_count: int, allele_count: int) -> int | None:
    """Ploidy whose genotype count matches value_count, None when none does."""
    if allele_count < 2:
        return 1 if value_count == 1 else None
    for ploidy in range(1, _MAX_PLOIDY + 1):
        count = genotype_count(ploidy, allele_count)
        if count == value_count:
            return ploidy
        if count > value_count:
            break
    return None


def _split_numeric(value: str, field_name: str, sample_id: str | None) -> list[str]:
    values = value.split(",")
    for item in values:
        if item == MISSING:
            continue
        try:
            float(item)
        except ValueError:
            raise NonStandardCompliantSampleField(
                sample_id, field_name, value, f"'{item}' is not numeric"
            ) from None
    return values


def remap_genotype_array(
    value: str,
    allele_map: AlleleMap,
    ploidy: int | None = None,
    field_name: str = "PL",
    sample_id: str | None = None,
) -> str:
    """
    Reorder a per-genotype array (Number=G) into the split record's order.

    Args:
        value: Comma-separated values in original genotype order
        allele_map: Allele mapping of the split record
        ploidy: Sample ploidy from its GT, inferred from the array when None

    Raises:
        NonStandardCompliantSampleField: On non-numeric entries or a length
            that fits no ploidy / disagrees with the GT ploidy
    """
    if value == MISSING:
        return value

    values = _split_numeric(value, field_name, sample_id)
    original_count = allele_map.original_allele_count

    if ploidy is None:
        ploidy = infer_ploidy(len(values), original_count)
        if ploidy is None:
            raise NonStandardCompliantSampleField(
                sample_id, field_name, value,
                f"{len(values)} values match no ploidy for {original_count} alleles",
            )
    expected = genotype_count(ploidy, original_count)
    if len(values) != expected:
        raise NonStandardCompliantSampleField(
            sample_id, field_name, value,
            f"expected {expected} values for ploidy {ploidy} and {original_count} alleles",
        )

    if allele_map.is_identity:
        return value

    order = genotype_reordering_map(
        ploidy, original_count, allele_map.target_allele_count, allele_map.inverse
    )
    return ",".join(values[i] for i in order)


def remap_allele_array(
    value: str,
    allele_map: AlleleMap,
    field_name: str = "AD",
    sample_id: str | None = None,
) -> str:
    """Reorder a per-allele array (Number=R) into the split record's order."""
    if value == MISSING:
        return value

    values = _split_numeric(value, field_name, sample_id)
    if len(values) != allele_map.original_allele_count:
        raise NonStandardCompliantSampleField(
            sample_id, field_name, value,
            f"expected {allele_map.original_allele_count} values, one per allele",
        )
    return ",".join(values[i] for i in allele_map.inverse)


def rewrite_sample_data(
    format_fields: Sequence[str],
    samples: Mapping[str, Sequence[str]],
    allele_map: AlleleMap,
    genotype_array_fields: Iterable[str] = ("GL", "PL", "GP"),
    allele_array_fields: Iterable[str] = ("AD",),
    normalize_alleles: bool = False,
    alleles: Sequence[str] | None = None,
) -> dict[str, list[str]]:
    """
    Rewrite every sample of a study into a split record's allele space.

    Args:
        format_fields: Ordered format field names
        samples: Sample id -> values aligned with format_fields
        allele_map: Allele mapping of the split record
        genotype_array_fields: Number=G field names
        allele_array_fields: Number=R field names
        normalize_alleles: Sort allele indices of unphased genotypes
        alleles: Original reference and alternates, for GT tokens that spell
            an allele instead of indexing it

    Returns:
        Sample id -> rewritten values, in the input sample order
    """
    genotype_array_fields = set(genotype_array_fields)
    allele_array_fields = set(allele_array_fields)
    gt_idx = format_fields.index(GENOTYPE_FIELD) if GENOTYPE_FIELD in format_fields else None

    rewritten = {}
    for sample_id, values in samples.items():
        _check_value_count(format_fields, values, sample_id)
        new_values = list(values)

        ploidy = None
        if gt_idx is not None and gt_idx < len(values):
            genotype = Genotype.parse(
                values[gt_idx], allele_map.original_allele_count, sample_id, alleles
            )
            if genotype.is_called:
                ploidy = genotype.ploidy
            genotype = genotype.remap(allele_map.forward)
            if normalize_alleles:
                genotype = genotype.normalized()
            new_values[gt_idx] = str(genotype)

        for idx, name in enumerate(format_fields[:len(values)]):
            if name in genotype_array_fields:
                new_values[idx] = remap_genotype_array(
                    values[idx], allele_map, ploidy, field_name=name, sample_id=sample_id
                )
            elif name in allele_array_fields:
                new_values[idx] = remap_allele_array(
                    values[idx], allele_map, field_name=name, sample_id=sample_id
                )

        rewritten[sample_id] = new_values
    return rewritten


def reference_sample_data(
    format_fields: Sequence[str],
    samples: Mapping[str, Sequence[str]],
    allele_count: int,
    alleles: Sequence[str] | None = None,
) -> dict[str, list[str]]:
    """Sample data for a reference block: called alleles become 0."""
    gt_idx = format_fields.index(GENOTYPE_FIELD) if GENOTYPE_FIELD in format_fields else None

    rewritten = {}
    for sample_id, values in samples.items():
        _check_value_count(format_fields, values, sample_id)
        new_values = list(values)
        if gt_idx is not None and gt_idx < len(values):
            genotype = Genotype.parse(values[gt_idx], allele_count, sample_id, alleles)
            new_values[gt_idx] = str(genotype.to_reference())
        rewritten[sample_id] = new_values
    return rewritten


def _check_value_count(format_fields: Sequence[str], values: Sequence[str], sample_id: str) -> None:
    if len(values) > len(format_fields):
        raise NonStandardCompliantSampleField(
            sample_id, "FORMAT", ":".join(values),
            f"{len(values)} values for {len(format_fields)} format fields",
        )
