from __future__ import annotations

import gzip
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, Mapping, Union

from app.services.pharmacogenomics.annotation_table import (
    ANNOTATION_TABLE,
    WILD_TYPE_GT,
    VariantDefinition,
)

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# VCF column layout
# ----------------------------------------------------------------------
# CHROM POS ID REF ALT QUAL FILTER INFO FORMAT SAMPLE
ID_COLUMN = 2
SAMPLE_COLUMN = 9

VcfContent = Union[str, bytes, Path, Iterable[str]]


def extract_genotypes(
    content: VcfContent,
    *,
    table: Mapping[str, VariantDefinition] = ANNOTATION_TABLE,
) -> Dict[str, str]:
    """
    Scan VCF-like text and return the observed genotype of every panel variant.

    Only records whose ID column exactly matches a panel rsID are kept; every
    other line (headers, short or unrecognized records) is ignored. The GT is
    the first ':'-separated subfield of the first sample, phased '|' separators
    are normalized to '/'. A record without a sample GT counts as 0/0. When an
    rsID appears more than once, the last record wins.

    Args:
        content: File bytes, string, Path (.vcf or .vcf.gz) or line iterable.
        table:   Annotation table defining the panel rsIDs.
    """
    observed: Dict[str, str] = {}
    scanned = 0

    for raw in _normalize_to_lines(content):
        line = raw.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            continue
        scanned += 1

        cols = line.split("\t")
        if len(cols) <= ID_COLUMN:
            continue
        rsid = cols[ID_COLUMN]
        if rsid not in table:
            continue

        observed[rsid] = _sample_genotype(cols)

    logger.info("Scanned %d VCF records, %d panel variants observed", scanned, len(observed))
    return observed


def _sample_genotype(cols: list) -> str:
    """GT of the first sample column, defaulting to wild type."""
    if len(cols) <= SAMPLE_COLUMN:
        return WILD_TYPE_GT
    gt = cols[SAMPLE_COLUMN].split(":", 1)[0].strip()
    if not gt:
        return WILD_TYPE_GT
    return normalize_genotype(gt)


def normalize_genotype(gt: str) -> str:
    """Unphase a GT string: '0|1' -> '0/1'."""
    return gt.replace("|", "/")


def _normalize_to_lines(content: VcfContent) -> Iterator[str]:
    """Records are separated by LF only; a trailing CR is stripped by the caller."""
    if isinstance(content, Path):
        opener = gzip.open if content.suffix == ".gz" else open
        with opener(content, "rb") as f:
            content = f.read()
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    if isinstance(content, str):
        yield from content.split("\n")
        return
    yield from content

