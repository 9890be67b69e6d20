"""UViG handling: splitting, host-genome staging and the viral summary."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Sequence, Tuple, Union

import pandas as pd
from Bio import SeqIO

from mudoger.modules.aggregator import KeyRule, MasterTable, TableRef, aggregate
from mudoger.modules.schemas import CHECKV, UVIG_MAPPING, WISH
from mudoger.utils.logging import get_logger

logger = get_logger("viral")

HIGH_QUALITY = "High-quality"
PARTICLE_PREFIX = "viral-particle"


def split_uvigs(uvigs: Union[str, Path], dest_dir: Union[str, Path]) -> List[Tuple[str, str]]:
    """Write every record of ``uvigs`` to its own FASTA file.

    Returns (particle name, original contig id) pairs in input order.
    """
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    mapping = []
    for number, record in enumerate(SeqIO.parse(str(uvigs), "fasta"), 1):
        name = f"{PARTICLE_PREFIX}-{number}"
        SeqIO.write([record], str(dest_dir / f"{name}.fa"), "fasta")
        mapping.append((name, record.id))
    logger.info(f"Split {len(mapping)} UViGs into {dest_dir}")
    return mapping


def write_mapping(mapping: Sequence[Tuple[str, str]], output: Union[str, Path]) -> None:
    frame = pd.DataFrame(list(mapping), columns=["uvig", "original_contig"])
    Path(output).parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output, sep="\t", index=False)


def stage_host_genomes(bins_dir: Union[str, Path], dest_dir: Union[str, Path], extension: str = "fa") -> int:
    """Copy candidate host genomes next to the WIsH inputs."""
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    count = 0
    for genome in sorted(Path(bins_dir).glob(f"*.{extension}")):
        shutil.copy2(genome, dest_dir / genome.name)
        count += 1
    return count


def viral_summary(
    mapping_table: Union[str, Path],
    checkv_summary: Union[str, Path],
    wish_predictions: Union[str, Path],
) -> MasterTable:
    """Join the UViG mapping with CheckV quality and WIsH host predictions.

    CheckV reports original contig ids, so its rows are keyed through the
    mapping table; WIsH reports particle names directly.
    """
    mapping = pd.read_csv(mapping_table, sep="\t", dtype=str, keep_default_na=False)
    contig_of = dict(zip(mapping["uvig"], mapping["original_contig"]))

    exact = KeyRule()
    table = aggregate(
        [TableRef(UVIG_MAPPING, Path(mapping_table), exact)],
        canonical_ids=list(mapping["uvig"]),
        key_column="uvig",
    )
    checkv = aggregate(
        [TableRef(CHECKV, Path(checkv_summary), exact)],
        canonical_ids=[contig_of[u] for u in table.ids],
        key_column="contig_id",
    )
    wish = aggregate([TableRef(WISH, Path(wish_predictions), exact)], canonical_ids=table.ids, key_column="uvig")

    quality_by_contig = {r.id: r for r in checkv.records}
    for record, host in zip(table.records, wish.records):
        record.attributes.update(quality_by_contig[exact.normalize(contig_of[record.id])].attributes)
        record.attributes.update(host.attributes)
    table.columns = table.columns + checkv.columns + wish.columns
    table.issues = table.issues + checkv.issues + wish.issues
    return table


def high_quality(table: MasterTable) -> MasterTable:
    accepted, _ = table.partition(lambda r: r.attributes.get("checkv_quality") == HIGH_QUALITY)
    return accepted
