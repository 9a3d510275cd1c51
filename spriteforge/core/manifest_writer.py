"""Manifest writing logic."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from . import SpriteSheet
from ..utils import file_tools

logger = logging.getLogger(__name__)


def build_manifest(sheet: SpriteSheet, image_name: str) -> dict[str, Any]:
    """Describe every cell of a sheet, keyed by its grid index."""

    frames_payload = {}
    for placement in sheet.placements:
        frames_payload[f"frame_{placement.index:04d}"] = {
            "id": placement.frame_id,
            "x": placement.x,
            "y": placement.y,
            "width": placement.width,
            "height": placement.height,
            "timestamp": placement.timestamp,
        }

    return {
        "frames": frames_payload,
        "meta": {
            "image": image_name,
            "size": {"w": sheet.width, "h": sheet.height},
            "columns": sheet.columns,
            "rows": sheet.rows,
            "padding": sheet.padding,
        },
    }


def write_manifest(sheet: SpriteSheet, image_path: Path, manifest_path: Path | None = None) -> Path:
    """Write the JSON manifest next to the sheet image unless a path is given."""

    manifest_path = manifest_path or file_tools.with_suffix(image_path, ".json")
    file_tools.ensure_directory(manifest_path.parent)

    manifest = build_manifest(sheet, image_path.name)
    manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    logger.info("Wrote manifest to %s", manifest_path)
    return manifest_path
