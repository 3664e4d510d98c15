"""Reading VCF records into :class:`Variant` objects.

cyvcf2 does the file handling (plain or bgzipped VCF, BCF). Fields are taken
from the record's text form, so values keep their original spelling.
"""

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path

from cyvcf2 import VCF

from .errors import MalformedRecordError
from .models import StudyEntry, Variant

logger = logging.getLogger(__name__)

MISSING = "."


def parse_info(info: str) -> dict[str, str]:
    """Split an INFO column into key -> raw value; flags map to ""."""
    if info in ("", MISSING):
        return {}
    attributes = {}
    for entry in info.split(";"):
        if not entry:
            continue
        key, sep, value = entry.partition("=")
        attributes[key] = value if sep else ""
    return attributes


def variant_from_columns(
    columns: Sequence[str],
    samples: Sequence[str],
    study_id: str = "",
) -> Variant:
    """
    Build a Variant from the tab-separated columns of one VCF data line.

    QUAL, FILTER and ID (when set) are kept among the study attributes next
    to the INFO fields. The end is INFO END when present, otherwise the last
    reference base.

    Raises:
        MalformedRecordError: If the line has fewer than 8 columns or a
            non-integer POS or END
    """
    if len(columns) < 8:
        raise MalformedRecordError(f"Expected at least 8 VCF columns, got {len(columns)}")

    chrom, pos, variant_id, ref, alt, qual, filt, info = columns[:8]
    attributes = parse_info(info)
    try:
        position = int(pos)
        end = int(attributes["END"]) if attributes.get("END") else position + len(ref) - 1
    except ValueError:
        raise MalformedRecordError(
            f"Non-integer POS '{pos}' or END '{attributes.get('END')}' at {chrom}"
        ) from None
    attributes["QUAL"] = qual
    attributes["FILTER"] = filt
    if variant_id != MISSING:
        attributes["ID"] = variant_id

    format_fields: list[str] = []
    sample_data: dict[str, list[str]] = {}
    if len(columns) > 8 and columns[8] not in ("", MISSING):
        format_fields = columns[8].split(":")
        for name, value in zip(samples, columns[9:], strict=False):
            sample_data[name] = value.split(":")

    return Variant(
        chromosome=chrom,
        start=position,
        end=end,
        reference=ref,
        alternates=alt.split(","),
        studies=[StudyEntry(
            study_id=study_id,
            format=format_fields,
            samples=sample_data,
            file_attributes=attributes,
        )],
    )


def record_id(columns: Sequence[str]) -> str:
    """The "chrom:pos:ref:alt" id of a data line, for reporting lines that fail to parse."""
    return ":".join([*columns[:2], *columns[3:5]])


class VCFReader:
    """
    Streams the data lines of a VCF, VCF.gz or BCF file.

    ``samples`` is filled once iteration starts. ``columns`` yields raw column
    lists and ``to_variant`` parses one of them, so a malformed line can be
    reported without ending the iteration.
    """

    def __init__(self, vcf_path: Path, study_id: str | None = None):
        self.vcf_path = vcf_path
        self.study_id = study_id or vcf_path.name
        self.samples: list[str] = []

    def columns(self) -> Iterator[list[str]]:
        vcf = VCF(str(self.vcf_path))
        self.samples = list(vcf.samples)
        logger.debug("Reading %s with %d samples", self.vcf_path, len(self.samples))

        try:
            for record in vcf:
                yield str(record).rstrip("\n").split("\t")
        finally:
            vcf.close()

    def to_variant(self, columns: Sequence[str]) -> Variant:
        return variant_from_columns(columns, self.samples, self.study_id)

    def __iter__(self) -> Iterator[Variant]:
        for columns in self.columns():
            yield self.to_variant(columns)


def read_variants(vcf_path: Path, study_id: str | None = None) -> Iterator[Variant]:
    """
    Stream the records of a VCF file.

    Args:
        vcf_path: VCF, VCF.gz or BCF file
        study_id: Study identifier, defaults to the file name

    Returns:
        Iterator over one Variant per record, in file order. It raises
        MalformedRecordError on the first line that does not parse.
    """
    return iter(VCFReader(vcf_path, study_id))
