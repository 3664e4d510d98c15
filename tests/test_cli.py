"""Tests for Typer CLI interface."""

import json

from typer.testing import CliRunner

from variant_normalizer import __version__
from variant_normalizer.cli import app
from variant_normalizer.vcf_adapter import VCFReader

runner = CliRunner(env={"NO_COLOR": "1", "TERM": "dumb"})


def _read_jsonl(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line]


class TestCLIHelp:
    """Tests for CLI help and basic structure."""

    def test_help_command(self):
        """CLI should display help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "canonical bi-allelic form" in result.stdout

    def test_normalize_help(self):
        """Normalize command should list its options."""
        result = runner.invoke(app, ["normalize", "--help"])
        assert result.exit_code == 0
        assert "--reference-blocks" in result.stdout
        assert "--decompose-mnvs" in result.stdout
        assert "--config" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestCLINormalizeCommand:
    """Tests for the normalize command."""

    def test_missing_vcf_file(self):
        """Normalize should error if VCF file doesn't exist."""
        result = runner.invoke(app, ["normalize", "/nonexistent/file.vcf"])
        assert result.exit_code == 1
        assert "not found" in result.output.lower()

    def test_multiallelic_split(self, multiallelic_vcf_file, tmp_path):
        output = tmp_path / "out.jsonl"

        result = runner.invoke(
            app, ["normalize", str(multiallelic_vcf_file), "-o", str(output), "--no-progress"]
        )

        assert result.exit_code == 0, result.output
        records = _read_jsonl(output)
        assert [(r["start"], r["reference"], r["alternates"]) for r in records] == [
            (16349650, "G", ["T"]),
            (16349651, "", ["T"]),
            (16349700, "A", ["C"]),
        ]
        assert records[0]["studies"][0]["samples"]["S01"][0] == "0/1"
        assert records[0]["studies"][0]["call"] == "16349650:G:GT,T:1"
        assert records[2]["studies"][0]["call"] is None
        assert "3 variants" in result.output

    def test_json_lines_to_stdout(self, multiallelic_vcf_file):
        result = runner.invoke(app, ["normalize", str(multiallelic_vcf_file), "-q"])

        assert result.exit_code == 0
        starts = [json.loads(line)["start"] for line in result.stdout.splitlines() if line.startswith("{")]
        assert starts == [16349650, 16349651, 16349700]

    def test_decompose_with_reference_blocks(self, mnv_vcf_file, tmp_path):
        output = tmp_path / "out.jsonl"

        result = runner.invoke(app, [
            "normalize", str(mnv_vcf_file), "-o", str(output),
            "--reference-blocks", "--decompose-mnvs", "--no-progress",
        ])

        assert result.exit_code == 0, result.output
        records = _read_jsonl(output)
        assert [r["start"] for r in records] == [100, 101, 102, 105, 106]
        assert [r["type"] for r in records] == [
            "NO_VARIATION", "SNV", "NO_VARIATION", "INDEL", "NO_VARIATION",
        ]
        assert records[1]["studies"][0]["format"] == ["GT", "PS"]

    def test_mnv_kept_whole_by_default(self, mnv_vcf_file, tmp_path):
        output = tmp_path / "out.jsonl"

        result = runner.invoke(app, ["normalize", str(mnv_vcf_file), "-o", str(output), "-q"])

        assert result.exit_code == 0
        records = _read_jsonl(output)
        assert len(records) == 1
        assert records[0]["reference"] == "CTCGT"

    def test_config_file(self, mnv_vcf_file, tmp_path):
        config = tmp_path / "normalizer.toml"
        config.write_text("[variant_normalizer]\ndecompose_mnvs = true\n")
        output = tmp_path / "out.jsonl"

        result = runner.invoke(
            app, ["normalize", str(mnv_vcf_file), "-c", str(config), "-o", str(output), "-q"]
        )

        assert result.exit_code == 0
        assert len(_read_jsonl(output)) == 2

    def test_invalid_config(self, mnv_vcf_file, tmp_path):
        config = tmp_path / "normalizer.toml"
        config.write_text("[variant_normalizer]\nreference_ploidy = 0\n")

        result = runner.invoke(app, ["normalize", str(mnv_vcf_file), "-c", str(config)])

        assert result.exit_code == 1
        assert "Configuration Error" in result.output

    def test_missing_config(self, mnv_vcf_file, tmp_path):
        result = runner.invoke(
            app, ["normalize", str(mnv_vcf_file), "-c", str(tmp_path / "missing.toml")]
        )
        assert result.exit_code == 1
        assert "Configuration Error" in result.output

    def test_structural_records(self, structural_vcf_file, tmp_path):
        output = tmp_path / "out.jsonl"

        result = runner.invoke(app, ["normalize", str(structural_vcf_file), "-o", str(output), "-q"])

        assert result.exit_code == 0
        cn0, deletion = _read_jsonl(output)
        assert cn0["type"] == "CNV"
        assert cn0["structural"]["copy_number"] == 0
        assert (cn0["structural"]["ci_start_left"], cn0["structural"]["ci_start_right"]) == (86, 150)
        assert deletion["type"] == "DELETION"
        assert deletion["end"] == 1100


class TestCLIFailures:
    """Tests for records that cannot be normalized."""

    def test_bad_record_skipped(self, malformed_genotype_vcf_file, tmp_path):
        output = tmp_path / "out.jsonl"

        result = runner.invoke(
            app, ["normalize", str(malformed_genotype_vcf_file), "-o", str(output), "--no-progress"]
        )

        assert result.exit_code == 0
        assert [r["start"] for r in _read_jsonl(output)] == [100]
        assert "1 records could not be normalized" in result.output
        assert "1:200:C:T" in result.output

    def test_report(self, malformed_genotype_vcf_file, tmp_path):
        output = tmp_path / "out.jsonl"
        report = tmp_path / "report.json"

        result = runner.invoke(app, [
            "normalize", str(malformed_genotype_vcf_file),
            "-o", str(output), "-r", str(report), "-q",
        ])

        assert result.exit_code == 0
        data = json.loads(report.read_text())
        assert data["status"] == "partial"
        assert data["records_read"] == 2
        assert data["variants_written"] == 1
        assert data["records_failed"] == 1
        assert "timestamp" in data

    def test_report_success(self, multiallelic_vcf_file, tmp_path):
        report = tmp_path / "report.json"

        result = runner.invoke(app, [
            "normalize", str(multiallelic_vcf_file),
            "-o", str(tmp_path / "out.jsonl"), "-r", str(report), "-q",
        ])

        assert result.exit_code == 0
        data = json.loads(report.read_text())
        assert data["status"] == "success"
        assert data["variants_written"] == 3

    def test_unparsable_line_skipped(self, mnv_vcf_file, tmp_path, monkeypatch):
        """A line with a non-integer END is reported and later lines still run."""
        lines = [
            ["1", "100", ".", "A", "G", ".", "PASS", ".", "GT", "0/1"],
            ["1", "150", ".", "N", "<DEL>", ".", "PASS", "SVTYPE=DEL;END=2x0", "GT", "1/1"],
            ["1", "300", ".", "C", "T", ".", "PASS", ".", "GT", "0/1"],
        ]

        def fake_columns(reader):
            reader.samples = ["S1"]
            yield from lines

        monkeypatch.setattr(VCFReader, "columns", fake_columns)
        output = tmp_path / "out.jsonl"
        report = tmp_path / "report.json"

        result = runner.invoke(app, [
            "normalize", str(mnv_vcf_file), "-o", str(output), "-r", str(report), "--no-progress",
        ])

        assert result.exit_code == 0, result.output
        assert [r["start"] for r in _read_jsonl(output)] == [100, 300]
        assert "1:150:N:<DEL>" in result.output
        data = json.loads(report.read_text())
        assert data["records_read"] == 3
        assert data["records_failed"] == 1
