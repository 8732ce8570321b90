"""Resolve Python type annotations into schemas and named definitions.

Primitives resolve to inline schemas. Containers resolve to arrays (or maps)
of their element schema and are never registered themselves. Any other class
is registered once under a stable name and referenced with ``$ref``.
"""

import dataclasses
import datetime
import enum
import inspect
import logging
import re
import types
import uuid
from collections import abc
from collections.abc import Iterable
from decimal import Decimal
from typing import (
    Annotated,
    Any,
    ClassVar,
    ForwardRef,
    Literal,
    NotRequired,
    Required,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
    is_typeddict,
)

from pydantic import BaseModel

from api_doc_reader.annotations.markers import NoContent, Response, find_api_model
from api_doc_reader.annotations.meta import ApiModelProperty
from api_doc_reader.errors import TypeResolutionError
from api_doc_reader.model.document import Schema

logger = logging.getLogger(__name__)

PRIMITIVES: dict[type, tuple[str, str | None]] = {
    bool: ("boolean", None),
    int: ("integer", "int32"),
    float: ("number", "double"),
    Decimal: ("number", None),
    str: ("string", None),
    bytes: ("string", "byte"),
    datetime.datetime: ("string", "date-time"),
    datetime.date: ("string", "date"),
    datetime.time: ("string", "time"),
    uuid.UUID: ("string", "uuid"),
}

ARRAY_ORIGINS = (
    list,
    tuple,
    abc.Sequence,
    abc.MutableSequence,
    abc.Collection,
    abc.Iterable,
    abc.Iterator,
)
SET_ORIGINS = (set, frozenset, abc.Set, abc.MutableSet)
MAP_ORIGINS = (dict, abc.Mapping, abc.MutableMapping)


def is_no_body(tp: Any) -> bool:
    """True for declared types that document no response body."""
    if tp is None or tp is type(None) or tp is inspect.Signature.empty:
        return True
    return isinstance(tp, type) and issubclass(tp, (NoContent, Response))


def _enum_schema(values: list[Any]) -> Schema:
    if values and all(isinstance(v, bool) for v in values):
        kind = "boolean"
    elif values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        kind = "integer"
    elif values and all(isinstance(v, (int, float)) for v in values):
        kind = "number"
    else:
        kind = "string"
        values = [v if isinstance(v, str) else str(v) for v in values]
    return Schema(type=kind, enum=values)


def split_annotated(tp: Any) -> tuple[Any, tuple]:
    if get_origin(tp) is Annotated:
        args = get_args(tp)
        return args[0], args[1:]
    return tp, ()


def _strip_key_qualifier(tp: Any) -> Any:
    """``Required[T]`` / ``NotRequired[T]`` of a TypedDict key -> ``T``."""
    if get_origin(tp) in (Required, NotRequired):
        return get_args(tp)[0]
    return tp


def _model_name(tp: type) -> str:
    info = find_api_model(tp)
    if info is not None and info.name:
        return info.name
    return re.sub(r"\W+", "", tp.__name__)


class TypeResolver:
    """Turns declared types into schemas, registering complex types as definitions.

    ``known`` lists definition names that already exist in the target
    document; types with those names are referenced without being rebuilt.
    Everything registered by this resolver accumulates in ``definitions``.
    """

    def __init__(self, known: Iterable[str] = ()):
        self.definitions: dict[str, Schema] = {}
        self._known = set(known)
        self._names: dict[type, str] = {}

    def resolve(self, tp: Any) -> Schema | None:
        """Schema for ``tp``, or None when it documents no body."""
        if is_no_body(tp):
            return None
        return self._resolve(tp)

    def resolve_response(self, tp: Any, container: str = "") -> Schema | None:
        """Schema for a response type, wrapped in a declared container."""
        schema = self.resolve(tp)
        if schema is None or not container:
            return schema
        container = container.lower()
        if container == "list":
            return Schema(type="array", items=schema)
        if container == "set":
            return Schema(type="array", items=schema, unique_items=True)
        if container == "map":
            return Schema(type="object", additional_properties=schema)
        raise TypeResolutionError("Unknown response container", {"container": container})

    def _resolve(self, tp: Any) -> Schema:
        if tp is Any or tp is object or tp is None or tp is type(None):
            return Schema(type="object")
        if isinstance(tp, (str, ForwardRef)):
            raise TypeResolutionError("Unresolved forward reference", {"type": repr(tp)})
        if isinstance(tp, TypeVar):
            if tp.__bound__ is None:
                return Schema(type="object")
            return self._resolve(tp.__bound__)
        supertype = getattr(tp, "__supertype__", None)  # NewType
        if supertype is not None:
            return self._resolve(supertype)

        origin = get_origin(tp)
        if origin is not None:
            return self._resolve_generic(tp, origin, get_args(tp))

        if not isinstance(tp, type):
            raise TypeResolutionError("Not a type", {"type": repr(tp)})
        if is_typeddict(tp):
            return self._resolve_model(tp)
        if issubclass(tp, enum.Enum):
            return _enum_schema([member.value for member in tp])
        for base in tp.__mro__:
            if base in PRIMITIVES:
                kind, fmt = PRIMITIVES[base]
                return Schema(type=kind, format=fmt)

        container = self._resolve_container_class(tp)
        if container is not None:
            return container
        return self._resolve_model(tp)

    def _resolve_generic(self, tp: Any, origin: Any, args: tuple) -> Schema:
        if origin is Annotated:
            return self._resolve(args[0])
        if origin is Union or origin is types.UnionType:
            members = [a for a in args if a is not type(None)]
            if len(members) == 1:
                return self._resolve(members[0])
            return Schema(type="object")
        if origin is Literal:
            return _enum_schema(list(args))
        if origin in ARRAY_ORIGINS or origin in SET_ORIGINS or origin in MAP_ORIGINS:
            return self._container(origin, args)
        if isinstance(origin, type):
            # user generics resolve to their unparameterized class
            return self._resolve(origin)
        raise TypeResolutionError("Unsupported type", {"type": repr(tp)})

    def _container(self, origin: Any, args: tuple) -> Schema:
        if origin in MAP_ORIGINS:
            values = self._resolve(args[1]) if len(args) == 2 else None
            return Schema(type="object", additional_properties=values)
        items = self._resolve(args[0]) if args else Schema(type="object")
        if origin in SET_ORIGINS:
            return Schema(type="array", items=items, unique_items=True)
        return Schema(type="array", items=items)

    def _resolve_container_class(self, tp: type) -> Schema | None:
        """Schema for bare containers and concrete container subclasses."""
        if issubclass(tp, tuple) and hasattr(tp, "_fields"):
            return None  # namedtuple
        if tp in ARRAY_ORIGINS or tp in SET_ORIGINS or tp in MAP_ORIGINS:
            return self._container(tp, ())
        for klass in tp.__mro__:
            for base in vars(klass).get("__orig_bases__", ()):
                origin = get_origin(base)
                if origin in ARRAY_ORIGINS or origin in SET_ORIGINS or origin in MAP_ORIGINS:
                    return self._container(origin, get_args(base))
        for builtin in (dict, set, frozenset, list, tuple):
            if issubclass(tp, builtin):
                return self._container(builtin, ())
        return None

    def _resolve_model(self, tp: type) -> Schema:
        name = self._names.get(tp)
        if name is not None:
            return Schema.reference(name)

        name = _model_name(tp)
        self._names[tp] = name
        if name in self._known or name in self.definitions:
            return Schema.reference(name)

        info = find_api_model(tp)
        definition = Schema(type="object", description=(info.description or None) if info else None)
        # registered before the fields are walked so that cycles end in a $ref
        self.definitions[name] = definition
        logger.debug(f"Registering definition {name} for {tp.__qualname__}")

        properties: dict[str, Schema] = {}
        required: list[str] = []
        for field_name, annotation, is_required, extra in self._fields(tp):
            prop = next((m for m in extra["metadata"] if isinstance(m, ApiModelProperty)), None)
            if prop is not None and prop.hidden:
                continue
            schema = self._resolve(annotation)
            if prop is not None:
                field_name = prop.name or field_name
                if prop.required is not None:
                    is_required = prop.required
                schema.description = prop.description or extra.get("description")
                if prop.example is not None:
                    schema.example = prop.example
                if prop.allowable_values:
                    schema.enum = list(prop.allowable_values)
                if prop.read_only:
                    schema.read_only = True
            else:
                schema.description = extra.get("description")
            if schema.example is None and extra.get("example") is not None:
                schema.example = extra["example"]
            properties[field_name] = schema
            if is_required:
                required.append(field_name)

        definition.properties = properties or None
        definition.required = required or None
        return Schema.reference(name)

    def _fields(self, tp: type) -> list[tuple[str, Any, bool, dict[str, Any]]]:
        """(name, annotation, required, extra) for each documented field of ``tp``."""
        if issubclass(tp, BaseModel):
            fields = []
            for name, info in tp.model_fields.items():
                extra = {
                    "metadata": info.metadata,
                    "description": info.description,
                    "example": info.examples[0] if info.examples else None,
                }
                fields.append((info.alias or name, info.annotation, info.is_required(), extra))
            return fields

        try:
            hints = get_type_hints(tp, include_extras=True)
        except (NameError, TypeError) as exc:
            raise TypeResolutionError(
                "Cannot evaluate field annotations", {"type": tp.__qualname__, "reason": str(exc)}
            ) from exc

        if is_typeddict(tp):
            candidates = [(name, name in tp.__required_keys__) for name in hints]
        elif dataclasses.is_dataclass(tp):
            defaults = {
                f.name: f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
                for f in dataclasses.fields(tp)
            }
            candidates = [(name, defaults[name]) for name in hints if name in defaults]
        elif issubclass(tp, tuple):
            candidates = [(name, name not in tp._field_defaults) for name in tp._fields]
        else:
            candidates = [
                (name, not hasattr(tp, name))
                for name, hint in hints.items()
                if get_origin(hint) is not ClassVar and hint is not ClassVar
            ]

        fields = []
        for name, is_required in candidates:
            if name.startswith("_"):
                continue
            annotation, metadata = split_annotated(_strip_key_qualifier(hints.get(name, Any)))
            annotation = _strip_key_qualifier(annotation)
            fields.append((name, annotation, is_required, {"metadata": metadata}))
        return fields
