"""variant-normalizer: canonical representation of VCF variants."""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .config import ConfigValidationError, NormalizerConfig, load_config
from .errors import MalformedRecordError
from .normalizer import NormalizationFailure, VariantNormalizer
from .vcf_adapter import VCFReader, record_id

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


app = typer.Typer(
    name="variant-normalizer", help="Normalize VCF variants into a canonical bi-allelic form"
)
console = Console(stderr=True)


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version and exit"
        ),
    ] = None,
) -> None:
    pass


def setup_logging(verbose: bool, quiet: bool, default_level: str = "INFO") -> None:
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, default_level, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("variant_normalizer").setLevel(level)


@app.command()
def normalize(
    vcf_path: Path = typer.Argument(..., help="Path to VCF file (.vcf, .vcf.gz, .bcf)"),
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write JSON lines here instead of stdout")
    ] = None,
    config_file: Annotated[
        Path | None, typer.Option("--config", "-c", help="TOML configuration file")
    ] = None,
    reference_blocks: bool = typer.Option(
        False, "--reference-blocks", help="Emit reference blocks for uncovered positions"
    ),
    decompose_mnvs: bool = typer.Option(
        False, "--decompose-mnvs", help="Split MNVs into phased minimal variants"
    ),
    normalize_alleles: bool = typer.Option(
        False, "--normalize-alleles", help="Sort allele indices of unphased genotypes"
    ),
    report: Annotated[
        Path | None, typer.Option("--report", "-r", help="Write JSON report to file")
    ] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show progress spinner"),
) -> None:
    """Normalize every record of a VCF file and write the results as JSON lines."""
    if not vcf_path.exists():
        console.print(f"[red]Error: VCF file not found: {vcf_path}[/red]")
        raise typer.Exit(1)

    overrides = {}
    if reference_blocks:
        overrides["generate_reference_blocks"] = True
    if decompose_mnvs:
        overrides["decompose_mnvs"] = True
    if normalize_alleles:
        overrides["normalize_alleles"] = True

    try:
        if config_file:
            config = load_config(config_file, overrides)
        else:
            config = NormalizerConfig.from_dict(overrides)
    except (ConfigValidationError, FileNotFoundError) as e:
        console.print(f"[red]Configuration Error: {e}[/red]")
        raise typer.Exit(1) from None

    setup_logging(verbose, quiet, config.log_level)

    normalizer = VariantNormalizer(config)
    start_time = time.monotonic()
    records_read = 0
    variants_written = 0
    failures: list[NormalizationFailure] = []

    out = open(output, "w") if output else sys.stdout
    try:
        if not quiet:
            console.print(f"Normalizing {vcf_path.name}...")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            disable=quiet or not progress,
        ) as progress_bar:
            task = progress_bar.add_task("Normalizing variants...", total=None)
            reader = VCFReader(vcf_path)
            for columns in reader.columns():
                records_read += 1
                try:
                    variant = reader.to_variant(columns)
                except MalformedRecordError as e:
                    logger.warning("Skipping %s: %s", record_id(columns), e)
                    failures.append(NormalizationFailure(record_id(columns), e))
                    continue
                batch = normalizer.normalize_batch([variant])
                failures.extend(batch.failures)
                for normalized in batch.variants:
                    out.write(json.dumps(normalized.to_dict()) + "\n")
                variants_written += len(batch.variants)
                progress_bar.update(task, description=f"Normalized {records_read:,} records")
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None
    finally:
        if output:
            out.close()

    elapsed = time.monotonic() - start_time
    if not quiet:
        console.print(
            f"[green]✓[/green] Normalized {records_read:,} records into "
            f"{variants_written:,} variants"
        )
        if failures:
            console.print(f"[yellow]⚠[/yellow] {len(failures):,} records could not be normalized")
            for failure in failures[:10]:
                console.print(f"  {failure.variant_id}: {failure.error}")
        if output:
            console.print(f"  Output: {output}")

    if report:
        report_data = {
            "status": "success" if not failures else "partial",
            "vcf_file": str(vcf_path),
            "records_read": records_read,
            "variants_written": variants_written,
            "records_failed": len(failures),
            "elapsed_seconds": round(elapsed, 3),
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        }
        with open(report, "w") as f:
            json.dump(report_data, f, indent=2)
            f.write("\n")
        if not quiet:
            console.print(f"  Report: {report}")


if __name__ == "__main__":
    app()
