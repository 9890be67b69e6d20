"""Size filter for eukaryotic bins."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Union

from mudoger.utils.logging import LogTemplates, get_logger

logger = get_logger("bin_filter")


def filter_bins_by_size(
    bins_dir: Union[str, Path],
    dest_dir: Union[str, Path],
    min_bytes: int,
    extension: str = "fa",
) -> List[Path]:
    """Copy bins strictly larger than ``min_bytes`` into ``dest_dir``.

    Bins left in ``dest_dir`` by an earlier run are removed first.
    """
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    for stale in dest_dir.glob(f"*.{extension}"):
        stale.unlink()
    candidates = sorted(Path(bins_dir).glob(f"*.{extension}"))
    kept = []
    for fasta in candidates:
        if fasta.stat().st_size > min_bytes:
            target = dest_dir / fasta.name
            shutil.copy2(fasta, target)
            kept.append(target)
    removed = len(candidates) - len(kept)
    percent = 100.0 * len(kept) / len(candidates) if candidates else 0.0
    logger.info(LogTemplates.FILTERING_STATS.format(kept=len(kept), removed=removed, percent=percent))
    return kept
