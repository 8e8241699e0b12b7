# subwriter/results.py
"""
Result records handed to the output writer, and a loader for results files.

A results file holds one record per line, either as a JSON object
({"host": ..., "ip": ..., "source": ...}) or as plain "host[,ip[,source]]".
Blank lines and lines starting with '#' are skipped.
"""
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from .utils import normalize, logger


class ResultsFileError(ValueError):
    """Raised when a results file cannot be read or a line cannot be parsed."""


@dataclass(frozen=True)
class HostEntry:
    """A discovered host without address information."""
    host: str
    source: str = ""


@dataclass(frozen=True)
class Result:
    """A discovered host with its resolved address (empty when unresolved)."""
    host: str
    ip: str = ""
    source: str = ""

    def to_host_entry(self) -> HostEntry:
        return HostEntry(host=self.host, source=self.source)


def _parse_json_line(line: str, lineno: int) -> Result:
    try:
        item = json.loads(line)
    except json.JSONDecodeError as e:
        raise ResultsFileError(f"line {lineno}: invalid JSON: {e}") from e
    if not isinstance(item, dict) or not isinstance(item.get("host"), str):
        raise ResultsFileError(f"line {lineno}: expected an object with a 'host' string")
    # missing or null fields become empty strings
    ip = "" if item.get("ip") is None else str(item["ip"])
    source = "" if item.get("source") is None else str(item["source"])
    return Result(host=item["host"], ip=ip, source=source)


def _parse_plain_line(line: str) -> Result:
    parts = line.split(",", 2)
    parts += [""] * (3 - len(parts))
    host, ip, source = (p.strip() for p in parts)
    return Result(host=host, ip=ip, source=source)


def parse_line(line: str, lineno: int = 0) -> Result:
    """Parse one results line (JSON object or plain host[,ip[,source]])."""
    if line.startswith("{"):
        return _parse_json_line(line, lineno)
    return _parse_plain_line(line)


def load_results(path) -> Dict[str, Result]:
    """
    Read a results file into a mapping host -> Result.

    Hostnames are normalized; the first record seen for a host wins.
    The returned mapping is ordered by host name.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ResultsFileError(f"cannot read results file {path}: {e}") from e

    results: Dict[str, Result] = {}
    skipped = 0
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        record = parse_line(line, lineno)
        host = normalize(record.host)
        if not host:
            skipped += 1
            continue
        if host in results:
            skipped += 1
            continue
        results[host] = Result(host=host, ip=record.ip, source=record.source)

    logger.debug(f"Loaded {len(results)} results from {path} (skipped {skipped})")
    return {host: results[host] for host in sorted(results)}
