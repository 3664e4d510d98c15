"""Errors raised while normalizing a single record."""


class NormalizationError(Exception):
    """A record could not be normalized."""

    pass


class NonStandardCompliantSampleField(NormalizationError):
    """A sample field does not parse against the record's alleles or format."""

    def __init__(self, sample_id: str | None, field_name: str, value: str, reason: str):
        self.sample_id = sample_id
        self.field_name = field_name
        self.value = value
        self.reason = reason
        who = f"sample '{sample_id}'" if sample_id else "sample"
        super().__init__(f"Non-standard {field_name} value '{value}' for {who}: {reason}")


class BreakendParseError(NormalizationError):
    """Bracket notation matches none of the four breakend forms."""

    pass


class MalformedRecordError(NormalizationError, ValueError):
    """A VCF data line does not parse into a variant."""

    pass
