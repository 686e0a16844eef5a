"""Filesystem store keeping the latest report and an archive of past runs."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from split_ledger.domain.errors import ReportNotFoundError
from split_ledger.infrastructure.parsing.utils import compute_file_hash

logger = logging.getLogger(__name__)

LATEST_KEY = "reports/latest"
LATEST_FILENAME = "attorney-splits-latest.xlsx"


def _run_id(generated_at: datetime) -> str:
    return generated_at.strftime("%Y%m%d_%H%M%S")


def _unique_dir(parent: Path, name: str) -> Path:
    candidate = parent / name
    suffix = 2
    while candidate.exists():
        candidate = parent / f"{name}-{suffix}"
        suffix += 1
    return candidate


def _stage(path: Path, data: bytes) -> Path:
    staged = path.with_name(f".{path.name}.tmp")
    staged.write_bytes(data)
    return staged


@dataclass(frozen=True)
class LatestReportInfo:
    generated_at: str
    matters: int
    filename: str
    bytes: int
    sha256: str = ""


class FileSystemReportStore:
    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def latest_dir(self) -> Path:
        return self._root / LATEST_KEY

    def save_latest(self, payload: bytes, *, generated_at: datetime, matters: int) -> str:
        latest = self.latest_dir
        latest.mkdir(parents=True, exist_ok=True)
        info = {
            "generated_at": generated_at.isoformat(),
            "matters": matters,
            "filename": LATEST_FILENAME,
            "bytes": len(payload),
            "sha256": compute_file_hash(payload),
        }
        manifest = json.dumps(info, indent=2).encode("utf-8")

        # both files are fully written before either replaces the current pair
        staged_workbook = _stage(latest / "latest.xlsx", payload)
        staged_info = _stage(latest / "latest.json", manifest)
        staged_workbook.replace(latest / "latest.xlsx")
        staged_info.replace(latest / "latest.json")

        runs = self._root / "runs"
        runs.mkdir(parents=True, exist_ok=True)
        run_dir = _unique_dir(runs, _run_id(generated_at))
        run_dir.mkdir()
        (run_dir / LATEST_FILENAME).write_bytes(payload)
        (run_dir / "manifest.json").write_bytes(manifest)

        logger.info("Stored latest report (%d matters, %d bytes) at %s", matters, len(payload), latest)
        return str(latest / "latest.xlsx")

    def load_latest(self) -> bytes:
        path = self.latest_dir / "latest.xlsx"
        if not path.exists():
            raise ReportNotFoundError("No latest workbook has been stored")
        return path.read_bytes()

    def latest_info(self) -> LatestReportInfo:
        path = self.latest_dir / "latest.json"
        if not path.exists():
            raise ReportNotFoundError("No latest workbook has been stored")
        data = json.loads(path.read_text(encoding="utf-8"))
        return LatestReportInfo(
            generated_at=data["generated_at"],
            matters=int(data["matters"]),
            filename=data.get("filename", LATEST_FILENAME),
            bytes=int(data.get("bytes", 0)),
            sha256=data.get("sha256", ""),
        )

    def list_runs(self) -> list[str]:
        runs = self._root / "runs"
        if not runs.exists():
            return []
        return sorted(p.name for p in runs.iterdir() if p.is_dir())
