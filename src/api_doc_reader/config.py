"""Reader configuration — one API source per file, loaded from YAML or JSON."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ValidationError

from api_doc_reader.errors import ConfigError
from api_doc_reader.model.document import Document, Info, Parameter, Tag


class ApiSource(BaseModel):
    """Where to find resources and how to describe the resulting document."""

    locations: list[str] = []
    info: Info = Info()
    host: str | None = None
    base_path: str | None = None
    schemes: list[str] = []
    include_hidden: bool = False
    consumes: list[str] = []
    produces: list[str] = []
    tags: list[Tag] = []
    parameters: list[Parameter] = []
    output_path: Path | None = None
    output_format: Literal["json", "yaml"] | None = None

    @property
    def seed_tags(self) -> dict[str, Tag]:
        return {tag.name: tag for tag in self.tags}

    def new_document(self) -> Document:
        """An empty document carrying the source's top-level metadata."""
        return Document(
            info=self.info,
            host=self.host,
            base_path=self.base_path,
            schemes=self.schemes or None,
        )


def load_config(path: Path) -> ApiSource:
    """Load an ``ApiSource`` from a YAML (or JSON) file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError("Cannot read configuration file", {"path": str(path), "reason": str(exc)}) from exc

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError("Configuration file is not valid YAML", {"path": str(path), "reason": str(exc)}) from exc
    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping", {"path": str(path)})

    try:
        return ApiSource.model_validate(data)
    except ValidationError as exc:
        raise ConfigError("Invalid configuration", {"path": str(path), "reason": str(exc)}) from exc
