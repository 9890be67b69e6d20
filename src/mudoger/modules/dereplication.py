"""Content-addressed dereplication of refined bins.

Bins refined under different parameter sets can be byte-identical. Every bin
is keyed by the MD5 digest of its content and one representative is kept per
digest. The selection is a pure function of the (id, digest) pairs, so it does
not depend on the order in which the filesystem lists the bins.
"""

from __future__ import annotations

import hashlib
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple, Union

import pandas as pd

from mudoger.exceptions import PipelineError
from mudoger.utils.logging import get_logger

logger = get_logger("dereplication")

CHUNK_SIZE = 1 << 20


def file_digest(path: Union[str, Path]) -> str:
    md5 = hashlib.md5()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            md5.update(chunk)
    return md5.hexdigest()


@dataclass(frozen=True)
class Representative:
    digest: str
    id: str
    duplicates: Tuple[str, ...] = ()


def select_representatives(pairs: Iterable[Tuple[str, str]]) -> List[Representative]:
    """Pick one id per digest.

    The representative is the smallest id of its group and the result is
    ordered by representative id, so any permutation of ``pairs`` gives the
    same answer.
    """
    groups: Dict[str, List[str]] = {}
    for item_id, digest in pairs:
        groups.setdefault(digest, []).append(item_id)
    representatives = []
    for digest, ids in groups.items():
        ordered = sorted(set(ids))
        representatives.append(Representative(digest, ordered[0], tuple(ordered[1:])))
    return sorted(representatives, key=lambda r: r.id)


@dataclass(frozen=True)
class DereplicatedBin:
    name: str
    source: Path
    digest: str
    duplicates: Tuple[str, ...]


def dereplicate_bins(
    bin_files: Sequence[Union[str, Path]],
    dest_dir: Union[str, Path],
    sample: str,
    extension: str = "fa",
) -> List[DereplicatedBin]:
    """Copy one file per unique content into ``dest_dir`` as ``<sample>-bin.<n>.<ext>``.

    Raises:
        PipelineError: If ``bin_files`` is empty.
    """
    if not bin_files:
        raise PipelineError("No refined bins found to dereplicate")

    paths = [Path(p) for p in bin_files]
    by_id = {str(p): p for p in paths}
    representatives = select_representatives((str(p), file_digest(p)) for p in paths)

    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    kept = []
    for number, rep in enumerate(representatives, 1):
        name = f"{sample}-bin.{number}.{extension}"
        shutil.copy2(by_id[rep.id], dest_dir / name)
        kept.append(DereplicatedBin(name, by_id[rep.id], rep.digest, rep.duplicates))

    logger.info(f"Dereplicated {len(paths)} bins into {len(kept)} unique bins")
    return kept


def write_dereplication_map(bins: Sequence[DereplicatedBin], output: Union[str, Path]) -> None:
    frame = pd.DataFrame(
        [
            (b.name, str(b.source), b.digest, ";".join(b.duplicates))
            for b in bins
        ],
        columns=["bin", "source", "md5", "duplicates"],
    )
    frame.to_csv(output, sep="\t", index=False)
