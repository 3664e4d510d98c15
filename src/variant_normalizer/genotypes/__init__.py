"""Genotype and genotype-indexed sample field rewriting."""

from .rewriter import (
    AlleleMap,
    Genotype,
    enumerate_genotypes,
    genotype_count,
    genotype_index,
    genotype_reordering_map,
    infer_ploidy,
    reference_sample_data,
    remap_allele_array,
    remap_genotype_array,
    rewrite_sample_data,
)

__all__ = [
    "AlleleMap",
    "Genotype",
    "enumerate_genotypes",
    "genotype_count",
    "genotype_index",
    "genotype_reordering_map",
    "infer_ploidy",
    "reference_sample_data",
    "remap_allele_array",
    "remap_genotype_array",
    "rewrite_sample_data",
]
