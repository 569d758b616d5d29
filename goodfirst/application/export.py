"""Browsable export of curated repositories grouped by a field."""

import json
import logging
import os
import re
from typing import Dict, Iterable, List

from goodfirst.domain.repository import RepoRecord

logger = logging.getLogger(__name__)

UNGROUPED = "Other"


def group_by(records: Iterable[RepoRecord], field: str = "language") -> Dict[str, List[RepoRecord]]:
    """Group records by an attribute, keeping first-seen group order."""
    groups: Dict[str, List[RepoRecord]] = {}
    for record in records:
        key = getattr(record, field) or UNGROUPED
        groups.setdefault(str(key), []).append(record)
    return groups


def _slugify(value: str) -> str:
    # "C++" and "C#" must not collide with "C"
    value = value.lower().replace("+", "p").replace("#", "sharp")
    return re.sub(r"[^a-z0-9]+", "-", value).strip("-") or "unknown"


def write_repo_details(output_dir: str, records: Iterable[RepoRecord], field: str = "language") -> List[str]:
    """
    Write one JSON file per group plus an index.

    Args:
        output_dir: Directory to write into, created if missing
        records: Curated records to export
        field: RepoRecord attribute to group by

    Returns:
        Paths of the written files, index last
    """
    os.makedirs(output_dir, exist_ok=True)

    written = []
    index = {}
    used_slugs = {"index"}
    for group, members in group_by(records, field).items():
        slug = base = _slugify(group)
        suffix = 2
        while slug in used_slugs:
            slug = f"{base}-{suffix}"
            suffix += 1
        used_slugs.add(slug)

        file_name = f"{slug}.json"
        path = os.path.join(output_dir, file_name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump([record.to_dict() for record in members], f, indent=2, ensure_ascii=False)
        index[group] = {"file": file_name, "count": len(members)}
        written.append(path)

    index_path = os.path.join(output_dir, "index.json")
    with open(index_path, "w", encoding="utf-8") as f:
        json.dump(index, f, indent=2, ensure_ascii=False)
    written.append(index_path)

    logger.info(f"Exported {len(index)} {field} groups to {output_dir}")
    return written
