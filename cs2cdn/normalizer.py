"""Rename extraction output into the public naming scheme."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from cs2cdn.exceptions import NormalizationFailure
from cs2cdn.logging_utils import get_logger

# Extraction tool suffix -> canonical extension
SUFFIX_MARKERS: dict[str, str] = {
    "_png.png": ".png",
}


@dataclass
class NormalizeReport:
    renamed: list[Path] = field(default_factory=list)
    errors: list[NormalizationFailure] = field(default_factory=list)


def canonical_name(name: str) -> str | None:
    """Return the public file name for a tool-named file, or None if untouched."""
    for marker, extension in SUFFIX_MARKERS.items():
        if name.endswith(marker) and len(name) > len(marker):
            return name[: -len(marker)] + extension
    return None


def normalize(output_root: Path, log: logging.Logger | None = None) -> NormalizeReport:
    """Strip tool-specific suffixes from every file under output_root.

    Files keep their directory. A canonical file left by an earlier cycle
    is replaced by the freshly extracted one. Rename errors are logged and
    recorded per file.
    """
    log = log or get_logger(__name__)
    report = NormalizeReport()
    if not output_root.is_dir():
        return report

    for dirpath, _dirnames, filenames in os.walk(output_root):
        for filename in filenames:
            new_name = canonical_name(filename)
            if new_name is None:
                continue
            old_path = Path(dirpath) / filename
            new_path = old_path.with_name(new_name)
            try:
                old_path.replace(new_path)
            except OSError as e:
                failure = NormalizationFailure(str(old_path), str(e))
                log.error(str(failure))
                report.errors.append(failure)
                continue
            report.renamed.append(new_path)

    log.info("Renamed %d file(s)", len(report.renamed))
    return report
