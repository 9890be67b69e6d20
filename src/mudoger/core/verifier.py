"""Output verification for pipeline steps.

A step declares the artifacts it must leave behind as an
:class:`ExpectedOutputSpec`. :func:`verify` checks that specification against
the filesystem and reports every check it ran. Verification never writes
anything, so it is safe to call before and after a step as often as needed.
"""

from __future__ import annotations

import csv
import glob
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from mudoger.core.pipeline_types import CheckKind, CheckResult, VerificationResult
from mudoger.exceptions import ConfigurationError

_WILDCARDS = ("*", "?", "[")


@dataclass(frozen=True)
class ExpectedOutputSpec:
    """Declarative description of the artifacts a step produces (or consumes).

    Paths are templates relative to the run's output directory. They are
    formatted with the step values (``{sample}``, ``{threads}``...) and may
    contain shell wildcards; absolute templates are used as-is.

    ``min_rows`` counts lines including the header, so a table that needs at
    least one data row uses 2. ``min_columns`` counts tab-separated fields of
    the first line. ``dir_patterns`` maps a directory to a glob that must match
    at least one entry inside it.
    """

    required_files: tuple[str, ...] = ()
    required_dirs: tuple[str, ...] = ()
    min_rows: Mapping[str, int] = field(default_factory=dict)
    min_columns: Mapping[str, int] = field(default_factory=dict)
    required_columns: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    dir_patterns: Mapping[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (
            self.required_files
            or self.required_dirs
            or self.min_rows
            or self.min_columns
            or self.required_columns
            or self.dir_patterns
        )

    def files(self) -> tuple[str, ...]:
        """Every file template named anywhere in the spec, in declaration order."""
        ordered: list[str] = []
        for template in (
            list(self.required_files)
            + list(self.min_rows)
            + list(self.min_columns)
            + list(self.required_columns)
        ):
            if template not in ordered:
                ordered.append(template)
        return tuple(ordered)

    def dirs(self) -> tuple[str, ...]:
        ordered: list[str] = []
        for template in list(self.required_dirs) + list(self.dir_patterns):
            if template not in ordered:
                ordered.append(template)
        return tuple(ordered)


def table(
    path: str, *, min_rows: int = 2, min_columns: Optional[int] = None,
    columns: tuple[str, ...] = (),
) -> ExpectedOutputSpec:
    """Spec for a single header + data table."""
    return ExpectedOutputSpec(
        required_files=(path,),
        min_rows={path: min_rows},
        min_columns={path: min_columns} if min_columns else {},
        required_columns={path: columns} if columns else {},
    )


def directory(path: str, pattern: Optional[str] = None) -> ExpectedOutputSpec:
    """Spec for a directory, optionally required to hold entries matching ``pattern``."""
    return ExpectedOutputSpec(
        required_dirs=(path,),
        dir_patterns={path: pattern} if pattern else {},
    )


def merge(*specs: ExpectedOutputSpec) -> ExpectedOutputSpec:
    """Combine several specs into one conjunctive spec."""
    files: list[str] = []
    dirs: list[str] = []
    min_rows: dict[str, int] = {}
    min_columns: dict[str, int] = {}
    required_columns: dict[str, tuple[str, ...]] = {}
    dir_patterns: dict[str, str] = {}
    for spec in specs:
        files.extend(f for f in spec.required_files if f not in files)
        dirs.extend(d for d in spec.required_dirs if d not in dirs)
        min_rows.update(spec.min_rows)
        min_columns.update(spec.min_columns)
        required_columns.update(spec.required_columns)
        dir_patterns.update(spec.dir_patterns)
    return ExpectedOutputSpec(
        required_files=tuple(files),
        required_dirs=tuple(dirs),
        min_rows=min_rows,
        min_columns=min_columns,
        required_columns=required_columns,
        dir_patterns=dir_patterns,
    )


def resolve_template(
    template: str, base_dir: Union[str, Path], values: Optional[Mapping[str, Any]] = None
) -> Path:
    """Format a path template and anchor it at ``base_dir`` unless absolute."""
    try:
        rendered = template.format_map(dict(values or {}))
    except (KeyError, IndexError) as exc:
        raise ConfigurationError(f"Unresolved placeholder {exc} in path template '{template}'") from exc
    path = Path(rendered)
    if path.is_absolute():
        return path
    return Path(base_dir) / path


def _expand(path: Path) -> list[Path]:
    text = str(path)
    if any(ch in text for ch in _WILDCARDS):
        return [Path(p) for p in sorted(glob.glob(text))]
    return [path]


def _count_lines(path: Path, limit: int) -> int:
    """Count lines up to ``limit`` (enough to decide a minimum)."""
    count = 0
    with open(path, "rb") as handle:
        for _ in handle:
            count += 1
            if count >= limit:
                break
    return count


def _read_header(path: Path) -> list[str]:
    with open(path, newline="", encoding="utf-8-sig", errors="replace") as f:
        reader = csv.reader(f, delimiter="\t")
        return next(reader, [])


def _check_file(
    template: str, path: Path, spec: ExpectedOutputSpec
) -> list[CheckResult]:
    """Run the per-file checks in order, stopping at the first failure."""
    target = str(path)
    checks = []
    if not path.is_file():
        return [CheckResult(CheckKind.EXISTS, target, False, "file does not exist")]
    checks.append(CheckResult(CheckKind.EXISTS, target, True))

    if path.stat().st_size == 0:
        checks.append(CheckResult(CheckKind.NON_EMPTY, target, False, "file is empty"))
        return checks
    checks.append(CheckResult(CheckKind.NON_EMPTY, target, True))

    minimum = spec.min_rows.get(template)
    if minimum:
        lines = _count_lines(path, minimum)
        if lines < minimum:
            checks.append(
                CheckResult(
                    CheckKind.MIN_ROWS, target, False, f"{lines} line(s), expected at least {minimum}"
                )
            )
            return checks
        checks.append(CheckResult(CheckKind.MIN_ROWS, target, True))

    min_fields = spec.min_columns.get(template)
    columns = spec.required_columns.get(template)
    if min_fields or columns:
        header = _read_header(path)
        if min_fields and len(header) < min_fields:
            checks.append(
                CheckResult(
                    CheckKind.MIN_COLUMNS,
                    target,
                    False,
                    f"{len(header)} column(s), expected at least {min_fields}",
                )
            )
            return checks
        if columns:
            missing = [c for c in columns if c not in header]
            if missing:
                checks.append(
                    CheckResult(CheckKind.MIN_COLUMNS, target, False, f"missing columns {missing}")
                )
                return checks
        checks.append(CheckResult(CheckKind.MIN_COLUMNS, target, True))
    return checks


def verify(
    step_name: str,
    spec: ExpectedOutputSpec,
    base_dir: Union[str, Path],
    values: Optional[Mapping[str, Any]] = None,
) -> VerificationResult:
    """Check ``spec`` against the filesystem below ``base_dir``.

    Every declared file and directory is checked; the result is ok only when
    all checks pass. An empty spec verifies trivially.
    """
    result = VerificationResult(step_name=step_name)

    for template in spec.files():
        path = resolve_template(template, base_dir, values)
        matches = _expand(path)
        if not matches:
            result.checks.append(
                CheckResult(CheckKind.EXISTS, str(path), False, "no file matches pattern")
            )
            continue
        for match in matches:
            result.checks.extend(_check_file(template, match, spec))

    for template in spec.dirs():
        path = resolve_template(template, base_dir, values)
        if not path.is_dir():
            result.checks.append(
                CheckResult(CheckKind.DIR_EXISTS, str(path), False, "directory does not exist")
            )
            continue
        result.checks.append(CheckResult(CheckKind.DIR_EXISTS, str(path), True))
        pattern = spec.dir_patterns.get(template)
        if pattern:
            pattern = pattern.format_map(dict(values or {}))
            found = next(iter(path.glob(pattern)), None)
            result.checks.append(
                CheckResult(
                    CheckKind.DIR_CONTENT,
                    str(path),
                    found is not None,
                    "" if found is not None else f"no entries match '{pattern}'",
                )
            )

    return result


