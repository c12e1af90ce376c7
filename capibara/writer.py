"""Serialisation of the aggregated document to disk."""

from __future__ import annotations

import json
from pathlib import Path

from .models import Document


def render_document(document: Document, *, indent: int | None = None) -> str:
    return json.dumps(document.to_dict(), indent=indent, ensure_ascii=False)


def write_document(document: Document, path: Path, *, indent: int | None = None) -> Path:
    """Write the document as UTF-8 JSON and return the resolved output path."""
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_document(document, indent=indent), encoding="utf-8")
    return target.resolve()


__all__ = ["render_document", "write_document"]
