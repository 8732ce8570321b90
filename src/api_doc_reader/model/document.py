"""In-memory API description document (Swagger 2.0 shaped).

Scanners build ``ScanResult`` fragments; the reader folds them into one
``Document`` through the upsert methods below. ``tags``, ``paths`` and
``definitions`` stay ``None`` until something is added, so an empty scan
is distinguishable from a document that was found but is empty.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFINITIONS_PREFIX = "#/definitions/"

PATH_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Schema(_Model):
    """Inline schema, reference (``$ref``) or registered definition."""

    ref: str | None = Field(None, alias="$ref")
    type: str | None = None
    format: str | None = None
    description: str | None = None
    items: "Schema | None" = None
    properties: "dict[str, Schema] | None" = None
    additional_properties: "Schema | None" = Field(None, alias="additionalProperties")
    required: list[str] | None = None
    enum: list[Any] | None = None
    unique_items: bool | None = Field(None, alias="uniqueItems")
    read_only: bool | None = Field(None, alias="readOnly")
    example: Any = None

    @classmethod
    def reference(cls, name: str) -> "Schema":
        return cls(ref=DEFINITIONS_PREFIX + name)

    @property
    def ref_name(self) -> str | None:
        """Definition name behind this schema, looking through array items."""
        if self.ref:
            return self.ref.removeprefix(DEFINITIONS_PREFIX)
        if self.items is not None:
            return self.items.ref_name
        return None


class Tag(_Model):
    name: str
    description: str | None = None


class Info(_Model):
    title: str = "API"
    version: str = "1.0.0"
    description: str | None = None


class Parameter(_Model):
    """A single operation parameter (query, path, header, cookie, formData or body)."""

    name: str
    in_: str = Field(alias="in")
    description: str | None = None
    required: bool = False
    type: str | None = None
    format: str | None = None
    items: Schema | None = None
    collection_format: str | None = Field(None, alias="collectionFormat")
    default: Any = None
    enum: list[Any] | None = None
    pattern: str | None = None
    schema_: Schema | None = Field(None, alias="schema")

    @property
    def key(self) -> tuple[str, str]:
        return self.name, self.in_


class Response(_Model):
    description: str
    schema_: Schema | None = Field(None, alias="schema")


class Operation(_Model):
    tags: list[str] | None = None
    summary: str | None = None
    description: str | None = None
    operation_id: str | None = Field(None, alias="operationId")
    consumes: list[str] | None = None
    produces: list[str] | None = None
    parameters: list[Parameter] = []
    responses: dict[str, Response] = {}
    schemes: list[str] | None = None
    security: list[dict[str, list[str]]] | None = None
    deprecated: bool | None = None

    def merge(self, other: "Operation") -> None:
        """Fold ``other`` into this operation; its non-empty values win."""
        for field in ("summary", "description", "operation_id", "deprecated"):
            value = getattr(other, field)
            if value is not None:
                setattr(self, field, value)

        for field in ("tags", "consumes", "produces", "schemes"):
            theirs = getattr(other, field)
            if theirs:
                ours = getattr(self, field) or []
                setattr(self, field, ours + [v for v in theirs if v not in ours])

        if other.security:
            ours = self.security or []
            self.security = ours + [s for s in other.security if s not in ours]

        by_key = {p.key: i for i, p in enumerate(self.parameters)}
        for param in other.parameters:
            if param.key in by_key:
                self.parameters[by_key[param.key]] = param
            else:
                by_key[param.key] = len(self.parameters)
                self.parameters.append(param)

        self.responses.update(other.responses)


class PathItem(_Model):
    """Operations registered under one URL path, at most one per verb."""

    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    options: Operation | None = None
    head: Operation | None = None
    patch: Operation | None = None

    @property
    def operations(self) -> dict[str, Operation]:
        return {m: op for m in PATH_METHODS if (op := getattr(self, m)) is not None}

    def operation(self, method: str) -> Operation | None:
        method = method.lower()
        if method not in PATH_METHODS:
            return None
        return getattr(self, method)

    def set_operation(self, method: str, operation: Operation) -> None:
        method = method.lower()
        if method not in PATH_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        existing = getattr(self, method)
        if existing is None:
            setattr(self, method, operation)
        else:
            existing.merge(operation)

    def merge(self, other: "PathItem") -> None:
        for method, operation in other.operations.items():
            self.set_operation(method, operation)


class ScanResult(_Model):
    """Tags, paths and definitions contributed by scanning one resource."""

    tags: list[Tag] = []
    paths: dict[str, PathItem] = {}
    definitions: dict[str, Schema] = {}

    @property
    def is_empty(self) -> bool:
        return not (self.tags or self.paths or self.definitions)

    def add_tag(self, tag: Tag) -> None:
        _upsert_tag(self.tags, tag)

    def add_operation(self, path: str, method: str, operation: Operation) -> None:
        self.paths.setdefault(path, PathItem()).set_operation(method, operation)


class Document(_Model):
    """The aggregate API description handed back to the caller."""

    swagger: str = "2.0"
    info: Info | None = None
    host: str | None = None
    base_path: str | None = Field(None, alias="basePath")
    schemes: list[str] | None = None
    consumes: list[str] | None = None
    produces: list[str] | None = None
    tags: list[Tag] | None = None
    paths: dict[str, PathItem] | None = None
    definitions: dict[str, Schema] | None = None

    def tag(self, name: str) -> Tag | None:
        return next((t for t in self.tags or [] if t.name == name), None)

    def path(self, path: str) -> PathItem | None:
        return (self.paths or {}).get(path)

    def definition(self, name: str) -> Schema | None:
        return (self.definitions or {}).get(name)

    def add_tag(self, tag: Tag) -> Tag:
        if self.tags is None:
            self.tags = []
        return _upsert_tag(self.tags, tag)

    def add_path(self, path: str, item: PathItem) -> PathItem:
        if self.paths is None:
            self.paths = {}
        existing = self.paths.get(path)
        if existing is None:
            self.paths[path] = item
            return item
        existing.merge(item)
        return existing

    def add_operation(self, path: str, method: str, operation: Operation) -> None:
        item = PathItem()
        item.set_operation(method, operation)
        self.add_path(path, item)

    def add_definition(self, name: str, schema: Schema) -> bool:
        """Register a definition; returns False if the name was already taken."""
        if self.definitions is None:
            self.definitions = {}
        if name in self.definitions:
            return False
        self.definitions[name] = schema
        return True

    def merge(self, result: ScanResult) -> None:
        for tag in result.tags:
            self.add_tag(tag)
        for path, item in result.paths.items():
            self.add_path(path, item.model_copy(deep=True))
        for name, schema in result.definitions.items():
            self.add_definition(name, schema.model_copy(deep=True))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def _upsert_tag(tags: list[Tag], tag: Tag) -> Tag:
    for existing in tags:
        if existing.name == tag.name:
            if existing.description is None and tag.description is not None:
                existing.description = tag.description
            return existing
    tag = tag.model_copy()
    tags.append(tag)
    return tag
