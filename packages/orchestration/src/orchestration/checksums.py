"""Study output checksums for reproducibility verification."""

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict


CHECKSUM_FILE = "checksums.json"
HASHED_SUFFIXES = {".parquet", ".csv", ".yaml", ".yml", ".json"}


def hash_file(filepath, algorithm: str = "sha256") -> str:
    """Hash a single file in chunks."""
    h = hashlib.new(algorithm)
    with open(filepath, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def _hash_outputs(output_dir: Path) -> Dict[str, Dict[str, Any]]:
    files = sorted(
        f for f in output_dir.rglob("*")
        if f.is_file() and f.suffix in HASHED_SUFFIXES and f.name != CHECKSUM_FILE
    )
    return {
        str(f.relative_to(output_dir)): {"sha256": hash_file(f), "size_bytes": f.stat().st_size}
        for f in files
    }


def _combined(files: Dict[str, Dict[str, Any]]) -> str:
    combined = hashlib.sha256()
    for key in sorted(files):
        combined.update(files[key]["sha256"].encode())
    return combined.hexdigest()


def write_checksums(output_dir) -> Dict[str, Any]:
    """
    Hash every study output and write checksums.json beside them.

    Call this as the last step of a study run.
    """
    output_path = Path(output_dir)
    files = _hash_outputs(output_path)
    manifest = {
        "study_checksum": _combined(files),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "n_files": len(files),
        "total_bytes": sum(v["size_bytes"] for v in files.values()),
        "files": files,
    }
    with open(output_path / CHECKSUM_FILE, "w") as f:
        json.dump(manifest, f, indent=2)
    return manifest


def verify_checksums(output_dir) -> Dict[str, Any]:
    """
    Re-hash a study directory against its checksums.json.

    Returns {'ok': bool, 'changed': [...], 'missing': [...], 'added': [...]}.
    """
    output_path = Path(output_dir)
    with open(output_path / CHECKSUM_FILE) as f:
        recorded = json.load(f)["files"]
    current = _hash_outputs(output_path)

    missing = sorted(set(recorded) - set(current))
    added = sorted(set(current) - set(recorded))
    changed = sorted(
        name for name in set(recorded) & set(current)
        if recorded[name]["sha256"] != current[name]["sha256"]
    )
    return {
        "ok": not (missing or added or changed),
        "changed": changed,
        "missing": missing,
        "added": added,
    }


def compare_checksums(path_a, path_b) -> Dict[str, Any]:
    """
    Compare the checksums.json of two study runs.

    Two runs with the same config and seed should be identical.
    """
    with open(path_a) as f:
        a = json.load(f)
    with open(path_b) as f:
        b = json.load(f)

    files_a = set(a["files"])
    files_b = set(b["files"])
    changed = sorted(
        name for name in files_a & files_b
        if a["files"][name]["sha256"] != b["files"][name]["sha256"]
    )
    added = sorted(files_b - files_a)
    removed = sorted(files_a - files_b)

    return {
        "identical": not (added or removed or changed),
        "study_checksum_a": a["study_checksum"],
        "study_checksum_b": b["study_checksum"],
        "added": added,
        "removed": removed,
        "changed": changed,
    }
