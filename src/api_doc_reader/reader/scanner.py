"""Resource scanner — derives tags, paths and definitions from one resource class."""

import inspect
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, get_type_hints

from api_doc_reader.annotations.markers import (
    HTTP_METHODS,
    find_api,
    find_consumes,
    find_http_method,
    find_operation,
    find_path,
    find_produces,
    find_responses,
    is_deprecated,
)
from api_doc_reader.annotations.meta import ApiInfo, ApiParam, OperationInfo, ParamMarker
from api_doc_reader.errors import TypeResolutionError
from api_doc_reader.model.document import Operation, Parameter, Response, ScanResult, Schema, Tag
from api_doc_reader.reader.paths import compose_path, parse_template
from api_doc_reader.resolver.types import TypeResolver, split_annotated

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE = "successful operation"


def _methods(cls: type) -> list[tuple[str, Callable]]:
    """Functions defined on ``cls`` and its bases, in definition order."""
    found: dict[str, Callable] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if inspect.isfunction(member):
                found[name] = member
    return list(found.items())


def _verb(func: Callable, info: OperationInfo | None) -> str | None:
    verb = (info.http_method if info is not None else "") or find_http_method(func)
    if verb and verb.upper() in HTTP_METHODS:
        return verb.upper()
    return None


def _default_tag(resource: type, info: ApiInfo) -> str:
    return info.value.strip("/") or resource.__name__


class ResourceScanner:
    """Scans resource classes with a fixed set of reader options."""

    def __init__(
        self,
        include_hidden: bool = False,
        default_consumes: Sequence[str] = (),
        default_produces: Sequence[str] = (),
        seed_tags: Mapping[str, Tag] | None = None,
        seed_parameters: Sequence[Parameter] | None = None,
        known_definitions: Iterable[str] = (),
    ):
        self.include_hidden = include_hidden
        self.default_consumes = list(default_consumes)
        self.default_produces = list(default_produces)
        self.seed_tags = dict(seed_tags or {})
        self.seed_parameters = list(seed_parameters or [])
        self.known_definitions = set(known_definitions)

    def scan(self, resource: type, parent_path: str | None = None) -> ScanResult:
        """Scan one resource; returns an empty result if it is excluded."""
        result = ScanResult()
        info = find_api(resource)
        if info is None:
            logger.debug(f"Skipping {resource.__qualname__}: no @api marker")
            return result
        if info.hidden and not self.include_hidden:
            logger.debug(f"Skipping hidden resource {resource.__qualname__}")
            return result

        resolver = TypeResolver(known=self.known_definitions)
        self._scan_class(resource, info, parent_path, self.seed_tags, resolver, result, (resource,))
        result.definitions = resolver.definitions
        return result

    def _scan_class(
        self,
        resource: type,
        info: ApiInfo | None,
        parent_path: str | None,
        inherited_tags: Mapping[str, Tag],
        resolver: TypeResolver,
        result: ScanResult,
        chain: tuple[type, ...],
    ) -> None:
        tags = self._resource_tags(resource, info, inherited_tags)
        for tag in tags.values():
            result.add_tag(tag)

        class_path = find_path(resource)
        class_defaults = {
            "consumes": find_consumes(resource) or (info.consumes if info else []),
            "produces": find_produces(resource) or (info.produces if info else []),
            "protocols": info.protocols if info else [],
            "authorizations": info.authorizations if info else [],
        }

        for name, func in _methods(resource):
            operation_info = find_operation(func)
            if operation_info is not None and operation_info.hidden:
                continue
            method_path = find_path(func)
            verb = _verb(func, operation_info)
            full_path = compose_path(class_path, method_path, parent_path)

            if verb is None and method_path is not None:
                sub_resource = self._sub_resource(resource, name, func)
                if sub_resource is not None:
                    if sub_resource in chain:
                        logger.debug(f"Not re-entering {sub_resource.__qualname__} from {resource.__qualname__}.{name}")
                        continue
                    self._scan_class(
                        sub_resource, find_api(sub_resource), full_path, tags, resolver, result, chain + (sub_resource,)
                    )
                    continue

            if operation_info is None or full_path is None:
                continue

            full_path, patterns = parse_template(full_path)
            operation = self._operation(resource, name, func, operation_info, tags, class_defaults, patterns, resolver)
            if verb is None:
                logger.debug(f"{resource.__qualname__}.{name} has no HTTP method; only its types are registered")
                continue

            result.add_operation(full_path, verb, operation)
            for tag_name in operation_info.tags:
                result.add_tag(Tag(name=tag_name))

    def _resource_tags(self, resource: type, info: ApiInfo | None, inherited: Mapping[str, Tag]) -> dict[str, Tag]:
        tags = {name: tag.model_copy() for name, tag in inherited.items()}
        if info is None:
            return tags
        description = info.description or None
        for name in info.tags or [_default_tag(resource, info)]:
            if name not in tags:
                tags[name] = Tag(name=name, description=description)
            elif tags[name].description is None:
                tags[name].description = description
        return tags

    def _sub_resource(self, resource: type, name: str, func: Callable) -> type | None:
        try:
            returned = self._type_hints(resource, name, func).get("return")
        except TypeResolutionError as exc:
            logger.debug(f"{resource.__qualname__}.{name} is not a sub-resource locator: {exc}")
            return None
        if not isinstance(returned, type):
            return None
        for _, candidate in _methods(returned):
            if _verb(candidate, find_operation(candidate)) is not None:
                return returned
        return None

    def _type_hints(self, resource: type, name: str, func: Callable) -> dict[str, Any]:
        try:
            return get_type_hints(func, include_extras=True)
        except (NameError, TypeError) as exc:
            raise TypeResolutionError(
                "Cannot evaluate annotations",
                {"resource": resource.__qualname__, "operation": name, "reason": str(exc)},
            ) from exc

    def _operation(
        self,
        resource: type,
        name: str,
        func: Callable,
        info: OperationInfo,
        tags: Mapping[str, Tag],
        class_defaults: dict[str, Any],
        patterns: dict[str, str],
        resolver: TypeResolver,
    ) -> Operation:
        hints = self._type_hints(resource, name, func)
        try:
            parameters = self._parameters(func, hints, patterns, resolver)
            responses = self._responses(func, info, hints, resolver)
        except TypeResolutionError as exc:
            context = {**exc.context, "resource": resource.__qualname__, "operation": name}
            raise TypeResolutionError(exc.message, context) from exc

        tag_names = list(tags) + [t for t in info.tags if t not in tags]
        consumes = info.consumes or find_consumes(func) or class_defaults["consumes"] or self.default_consumes
        produces = info.produces or find_produces(func) or class_defaults["produces"] or self.default_produces
        schemes = info.protocols or class_defaults["protocols"]
        authorizations = info.authorizations or class_defaults["authorizations"]

        return Operation(
            tags=tag_names or None,
            summary=info.value or None,
            description=info.notes or None,
            operation_id=info.nickname or name,
            consumes=list(consumes) or None,
            produces=list(produces) or None,
            parameters=self._with_seed_parameters(parameters),
            responses=responses,
            schemes=list(schemes) or None,
            security=[{a.value: list(a.scopes)} for a in authorizations] or None,
            deprecated=True if is_deprecated(func) else None,
        )

    def _parameters(
        self, func: Callable, hints: dict[str, Any], patterns: dict[str, str], resolver: TypeResolver
    ) -> list[Parameter]:
        parameters = []
        for name, param in inspect.signature(func).parameters.items():
            if name in ("self", "cls") or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            annotation = hints.get(name, param.annotation)
            if annotation is inspect.Parameter.empty:
                continue
            base, metadata = split_annotated(annotation)
            marker = next((m for m in metadata if isinstance(m, ParamMarker)), None)
            extra = next((m for m in metadata if isinstance(m, ApiParam)), None) or ApiParam()
            if extra.hidden:
                continue

            if marker is None:
                schema = resolver.resolve(base) or Schema(type="object")
                parameters.append(
                    Parameter(
                        name="body",
                        in_="body",
                        description=extra.description or None,
                        required=True if extra.required is None else extra.required,
                        schema_=schema,
                    )
                )
                continue

            default = extra.default
            if default is None and param.default is not inspect.Parameter.empty:
                default = param.default
            parameters.append(self._simple_parameter(marker, base, extra, default, patterns, resolver))
        return parameters

    def _simple_parameter(
        self,
        marker: ParamMarker,
        base: Any,
        extra: ApiParam,
        default: Any,
        patterns: dict[str, str],
        resolver: TypeResolver,
    ) -> Parameter:
        schema = resolver.resolve(base)
        if schema is None or schema.ref or schema.type == "object":
            schema = Schema(type="string")

        is_array = schema.type == "array"
        if is_array:
            collection_format = "multi" if marker.location in ("query", "formData") else "csv"
        else:
            collection_format = None

        if marker.location == "path":
            required = True
        else:
            required = bool(extra.required)

        return Parameter(
            name=marker.name,
            in_=marker.location,
            description=extra.description or None,
            required=required,
            type=schema.type,
            format=schema.format,
            items=schema.items if is_array else None,
            collection_format=collection_format,
            default=default,
            enum=list(extra.allowable_values) or schema.enum,
            pattern=patterns.get(marker.name) if marker.location == "path" else None,
        )

    def _responses(
        self, func: Callable, info: OperationInfo, hints: dict[str, Any], resolver: TypeResolver
    ) -> dict[str, Response]:
        declared = info.response if info.response is not None else hints.get("return", inspect.Signature.empty)
        responses = {
            str(info.code): Response(
                description=DEFAULT_RESPONSE,
                schema_=resolver.resolve_response(declared, info.response_container),
            )
        }
        for extra in find_responses(func):
            responses[str(extra.code)] = Response(
                description=extra.message or DEFAULT_RESPONSE,
                schema_=resolver.resolve_response(extra.response, extra.response_container),
            )
        return responses

    def _with_seed_parameters(self, declared: list[Parameter]) -> list[Parameter]:
        """Declared parameters first, then seed parameters not already declared."""
        keys = {p.key for p in declared}
        seeds = [p.model_copy(deep=True) for p in self.seed_parameters if p.key not in keys]
        return declared + seeds
