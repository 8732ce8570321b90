"""Serialize a Document as JSON or YAML."""

import json
from pathlib import Path

import yaml

from api_doc_reader.model.document import Document

FORMATS = ("json", "yaml")


def detect_format(file_path: Path) -> str:
    """Output format implied by a file name: 'yaml' for .yaml/.yml, else 'json'."""
    if file_path.suffix.lower() in (".yaml", ".yml"):
        return "yaml"
    return "json"


def dump_document(document: Document, fmt: str = "json") -> str:
    """Render the document as text in the given format."""
    data = document.to_dict()
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    raise ValueError(f"Unsupported output format: {fmt}")


def write_document(document: Document, file_path: Path, fmt: str | None = None) -> Path:
    """Write the document to ``file_path``, creating parent directories."""
    fmt = fmt or detect_format(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(dump_document(document, fmt), encoding="utf-8")
    return file_path
