"""Data models for variant records and their normalized fragments."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

SV_THRESHOLD = 50

NO_VARIATION_ALLELE = "."
NON_REF_ALLELE = "<*>"
GVCF_NON_REF_ALLELE = "<NON_REF>"

_CN_PATTERN = re.compile(r"^<CN(\d+)>$")


class VariantType(Enum):
    SNV = "SNV"
    MNV = "MNV"
    INDEL = "INDEL"
    INSERTION = "INSERTION"
    DELETION = "DELETION"
    DUPLICATION = "DUPLICATION"
    TANDEM_DUPLICATION = "TANDEM_DUPLICATION"
    INVERSION = "INVERSION"
    CNV = "CNV"
    BREAKEND = "BREAKEND"
    SYMBOLIC = "SYMBOLIC"
    NO_VARIATION = "NO_VARIATION"


class StructuralVariantType(Enum):
    COPY_NUMBER_GAIN = "COPY_NUMBER_GAIN"
    COPY_NUMBER_LOSS = "COPY_NUMBER_LOSS"
    TANDEM_DUPLICATION = "TANDEM_DUPLICATION"


class BreakendOrientation(Enum):
    """Which ends of the local and mate pieces are joined."""

    SE = "SE"
    SS = "SS"
    ES = "ES"
    EE = "EE"


@dataclass(frozen=True)
class Breakend:
    """Mate locus of a breakend join."""

    mate_chromosome: str | None
    mate_position: int | None
    orientation: BreakendOrientation | None
    inserted_sequence: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "mate_chromosome": self.mate_chromosome,
            "mate_position": self.mate_position,
            "orientation": self.orientation.value if self.orientation else None,
            "inserted_sequence": self.inserted_sequence,
        }


@dataclass(frozen=True)
class StructuralVariantInfo:
    """Canonical structural fields derived from symbolic alleles and attributes."""

    ci_start_left: int | None = None
    ci_start_right: int | None = None
    ci_end_left: int | None = None
    ci_end_right: int | None = None
    copy_number: int | None = None
    left_inserted_sequence: str | None = None
    right_inserted_sequence: str | None = None
    structural_type: StructuralVariantType | None = None
    breakend: Breakend | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ci_start_left": self.ci_start_left,
            "ci_start_right": self.ci_start_right,
            "ci_end_left": self.ci_end_left,
            "ci_end_right": self.ci_end_right,
            "copy_number": self.copy_number,
            "left_inserted_sequence": self.left_inserted_sequence,
            "right_inserted_sequence": self.right_inserted_sequence,
            "structural_type": self.structural_type.value if self.structural_type else None,
            "breakend": self.breakend.to_dict() if self.breakend else None,
        }


@dataclass(frozen=True)
class VariantKeyFields:
    """Minimal coordinates and alleles of one fragment of a record.

    Insertions have an empty reference and ``end == start - 1``.
    """

    start: int
    end: int
    allele_index: int
    reference: str
    alternate: str
    phase_set: str | None = None
    reference_block: bool = False
    structural: StructuralVariantInfo | None = None

    def same_locus(self, other: "VariantKeyFields") -> bool:
        """True when both fragments describe the same allele at the same place."""
        return (
            self.start == other.start
            and self.end == other.end
            and self.reference == other.reference
            and self.alternate == other.alternate
        )


@dataclass(frozen=True)
class AlternateCoordinate:
    """An alternate allele kept as context on a split record."""

    chromosome: str
    start: int
    end: int
    reference: str
    alternate: str
    type: VariantType

    def to_dict(self) -> dict[str, Any]:
        return {
            "chromosome": self.chromosome,
            "start": self.start,
            "end": self.end,
            "reference": self.reference,
            "alternate": self.alternate,
            "type": self.type.value,
        }


@dataclass
class StudyEntry:
    """Per-study sample data attached to a variant."""

    study_id: str = ""
    format: list[str] = field(default_factory=list)
    samples: dict[str, list[str]] = field(default_factory=dict)
    secondary_alternates: list[AlternateCoordinate] = field(default_factory=list)
    file_attributes: dict[str, str] = field(default_factory=dict)

    # "start:ref:alts:alleleIndex" of the input record when normalization changed it
    call: str | None = None

    def sample_value(self, sample_id: str, field_name: str) -> str | None:
        """Value of one format field for one sample, or None when absent."""
        if field_name not in self.format or sample_id not in self.samples:
            return None
        values = self.samples[sample_id]
        idx = self.format.index(field_name)
        return values[idx] if idx < len(values) else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "study_id": self.study_id,
            "format": list(self.format),
            "samples": {k: list(v) for k, v in self.samples.items()},
            "secondary_alternates": [s.to_dict() for s in self.secondary_alternates],
            "file_attributes": dict(self.file_attributes),
            "call": self.call,
        }


@dataclass
class Variant:
    """A variant record: 1-based closed [start, end] coordinates."""

    chromosome: str
    start: int
    end: int
    reference: str
    alternates: list[str]
    type: VariantType | None = None
    structural: StructuralVariantInfo | None = None
    studies: list[StudyEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.type is None:
            self.type = infer_variant_type(self.reference, self.alternate)

    @property
    def alternate(self) -> str:
        """Primary alternate allele."""
        return self.alternates[0] if self.alternates else ""

    @property
    def length(self) -> int:
        if self.type == VariantType.NO_VARIATION or is_symbolic_allele(self.alternate):
            return self.end - self.start + 1
        return max(len(self.reference), len(self.alternate))

    @property
    def variant_id(self) -> str:
        return str(self)

    def __str__(self) -> str:
        reference = self.reference or "-"
        alternate = ",".join(a or "-" for a in self.alternates) or "-"
        return f"{self.chromosome}:{self.start}:{reference}:{alternate}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "chromosome": self.chromosome,
            "start": self.start,
            "end": self.end,
            "reference": self.reference,
            "alternates": list(self.alternates),
            "type": self.type.value if self.type else None,
            "structural": self.structural.to_dict() if self.structural else None,
            "studies": [s.to_dict() for s in self.studies],
        }


def is_symbolic_allele(allele: str) -> bool:
    """Angle-bracket tokens, bracket breakends and single breakends."""
    if not allele:
        return False
    if allele.startswith("<") and allele.endswith(">"):
        return True
    if "[" in allele or "]" in allele:
        return True
    return len(allele) > 1 and (allele.startswith(".") or allele.endswith("."))


def is_non_ref_allele(allele: str) -> bool:
    return allele in (NON_REF_ALLELE, GVCF_NON_REF_ALLELE)


def copy_number_from_allele(allele: str) -> int | None:
    match = _CN_PATTERN.match(allele)
    return int(match.group(1)) if match else None


def infer_variant_type(reference: str, alternate: str) -> VariantType:
    """Classify a bi-allelic record from its alleles."""
    if alternate == NO_VARIATION_ALLELE or is_non_ref_allele(alternate):
        return VariantType.NO_VARIATION

    if alternate.startswith("<") and alternate.endswith(">"):
        token = alternate[1:-1]
        if token == "DUP:TANDEM":
            return VariantType.TANDEM_DUPLICATION
        if token == "CNV" or copy_number_from_allele(alternate) is not None:
            return VariantType.CNV
        symbolic = {
            "DEL": VariantType.DELETION,
            "INS": VariantType.INSERTION,
            "DUP": VariantType.DUPLICATION,
            "INV": VariantType.INVERSION,
        }
        return symbolic.get(token.split(":")[0], VariantType.SYMBOLIC)

    if is_symbolic_allele(alternate):
        return VariantType.BREAKEND

    if len(reference) == 1 and len(alternate) == 1:
        return VariantType.SNV
    if len(reference) == len(alternate):
        return VariantType.MNV
    if max(len(reference), len(alternate)) > SV_THRESHOLD:
        if len(alternate) > len(reference):
            return VariantType.INSERTION
        return VariantType.DELETION
    return VariantType.INDEL
