"""Marker decorators for declaring resources, operations and models.

Usage::

    @api(tags=["pets"])
    @path("/pets")
    class PetResource:
        @api_operation("Find a pet", response=Pet)
        @GET
        @path("/{pet_id}")
        def find(self, pet_id: Annotated[int, PathParam("pet_id")]) -> Response:
            ...
"""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from api_doc_reader.annotations.meta import (
    ApiInfo,
    ApiModelInfo,
    ApiResponse,
    Authorization,
    OperationInfo,
)

T = TypeVar("T")

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

_API = "_apidoc_api"
_PATH = "_apidoc_path"
_HTTP_METHOD = "_apidoc_http_method"
_OPERATION = "_apidoc_operation"
_RESPONSES = "_apidoc_responses"
_CONSUMES = "_apidoc_consumes"
_PRODUCES = "_apidoc_produces"
_MODEL = "_apidoc_model"


class Response:
    """Opaque HTTP response; its body has no documented shape."""


class NoContent:
    """Explicit "no response body" marker for return annotations."""


class HttpMethod:
    """Decorator binding a method to one HTTP verb, e.g. ``@GET``."""

    def __init__(self, name: str):
        self.name = name

    def __call__(self, func: T) -> T:
        setattr(func, _HTTP_METHOD, self.name)
        return func

    def __repr__(self) -> str:
        return f"HttpMethod({self.name!r})"


GET = HttpMethod("GET")
POST = HttpMethod("POST")
PUT = HttpMethod("PUT")
DELETE = HttpMethod("DELETE")
PATCH = HttpMethod("PATCH")
HEAD = HttpMethod("HEAD")
OPTIONS = HttpMethod("OPTIONS")


def _authorizations(values) -> list[Authorization]:
    return [a if isinstance(a, Authorization) else Authorization(value=a) for a in values]


def api(
    value: str = "",
    *,
    tags: str | Sequence[str] = (),
    description: str = "",
    hidden: bool = False,
    consumes: Sequence[str] = (),
    produces: Sequence[str] = (),
    protocols: Sequence[str] = (),
    authorizations: Sequence[str | Authorization] = (),
) -> Callable[[type], type]:
    """Mark a class as an API resource."""
    if isinstance(tags, str):
        tags = [tags]
    info = ApiInfo(
        value=value,
        tags=list(tags),
        description=description,
        hidden=hidden,
        consumes=list(consumes),
        produces=list(produces),
        protocols=list(protocols),
        authorizations=_authorizations(authorizations),
    )

    def decorator(cls: type) -> type:
        setattr(cls, _API, info)
        return cls

    return decorator


def path(value: str) -> Callable[[T], T]:
    """Bind a class or a method to a URL path (template)."""

    def decorator(obj: T) -> T:
        setattr(obj, _PATH, value)
        return obj

    return decorator


def api_operation(
    value: str = "",
    *,
    notes: str = "",
    tags: Sequence[str] = (),
    response: Any = None,
    response_container: str = "",
    http_method: str = "",
    nickname: str = "",
    code: int = 200,
    consumes: Sequence[str] = (),
    produces: Sequence[str] = (),
    protocols: Sequence[str] = (),
    hidden: bool = False,
    authorizations: Sequence[str | Authorization] = (),
) -> Callable[[T], T]:
    """Mark a method as a documented API operation."""
    info = OperationInfo(
        value=value,
        notes=notes,
        tags=list(tags),
        response=response,
        response_container=response_container,
        http_method=http_method.upper(),
        nickname=nickname,
        code=code,
        consumes=list(consumes),
        produces=list(produces),
        protocols=list(protocols),
        hidden=hidden,
        authorizations=_authorizations(authorizations),
    )

    def decorator(func: T) -> T:
        setattr(func, _OPERATION, info)
        return func

    return decorator


def api_responses(*responses: ApiResponse) -> Callable[[T], T]:
    """Document additional response codes of an operation."""

    def decorator(func: T) -> T:
        setattr(func, _RESPONSES, list(responses))
        return func

    return decorator


def consumes(*media_types: str) -> Callable[[T], T]:
    def decorator(obj: T) -> T:
        setattr(obj, _CONSUMES, list(media_types))
        return obj

    return decorator


def produces(*media_types: str) -> Callable[[T], T]:
    def decorator(obj: T) -> T:
        setattr(obj, _PRODUCES, list(media_types))
        return obj

    return decorator


def api_model(name: str = "", *, description: str = "") -> Callable[[type], type]:
    """Name and describe a class registered as a definition."""
    info = ApiModelInfo(name=name, description=description)

    def decorator(cls: type) -> type:
        setattr(cls, _MODEL, info)
        return cls

    return decorator


def deprecated(func: T) -> T:
    """Flag an operation as deprecated (same attribute ``warnings.deprecated`` sets)."""
    func.__deprecated__ = "deprecated"
    return func


# Lookups used by the scanner and the type resolver.


def find_api(cls: type) -> ApiInfo | None:
    return getattr(cls, _API, None)


def find_path(obj: Any) -> str | None:
    return getattr(obj, _PATH, None)


def find_http_method(func: Callable) -> str | None:
    return getattr(func, _HTTP_METHOD, None)


def find_operation(func: Callable) -> OperationInfo | None:
    return getattr(func, _OPERATION, None)


def find_responses(func: Callable) -> list[ApiResponse]:
    return getattr(func, _RESPONSES, [])


def find_consumes(obj: Any) -> list[str]:
    return getattr(obj, _CONSUMES, [])


def find_produces(obj: Any) -> list[str]:
    return getattr(obj, _PRODUCES, [])


def find_api_model(cls: type) -> ApiModelInfo | None:
    """Model metadata declared on ``cls`` itself; subclasses do not inherit it."""
    return vars(cls).get(_MODEL) if isinstance(cls, type) else None


def is_deprecated(func: Callable) -> bool:
    return bool(getattr(func, "__deprecated__", None))
