"""Typed metadata records attached to resource classes and operation methods.

The decorators in ``markers`` store these records on the decorated object;
the scanner reads them back instead of inspecting decorators directly.
"""

from dataclasses import dataclass
from typing import Any, ClassVar

from pydantic import BaseModel


class Authorization(BaseModel):
    """A security scheme name plus the scopes an operation requires."""

    value: str
    scopes: list[str] = []


class ApiInfo(BaseModel):
    """Resource-level metadata set by ``@api``."""

    value: str = ""
    tags: list[str] = []
    description: str = ""
    hidden: bool = False
    consumes: list[str] = []
    produces: list[str] = []
    protocols: list[str] = []
    authorizations: list[Authorization] = []


class OperationInfo(BaseModel):
    """Operation-level metadata set by ``@api_operation``."""

    value: str = ""  # summary
    notes: str = ""
    tags: list[str] = []
    response: Any = None  # overrides the return annotation
    response_container: str = ""  # List / Set / Map
    http_method: str = ""
    nickname: str = ""
    code: int = 200
    consumes: list[str] = []
    produces: list[str] = []
    protocols: list[str] = []
    hidden: bool = False
    authorizations: list[Authorization] = []


class ApiResponse(BaseModel):
    """An additional documented response code for an operation."""

    code: int
    message: str = ""
    response: Any = None
    response_container: str = ""


class ApiModelInfo(BaseModel):
    """Definition-level metadata set by ``@api_model``."""

    name: str = ""
    description: str = ""


# Markers that live inside ``Annotated`` metadata are plain dataclasses:
# pydantic treats model instances found there as schema overrides.


@dataclass(frozen=True)
class ApiModelProperty:
    """Field metadata, used as ``Annotated[T, ApiModelProperty(...)]``."""

    name: str = ""
    description: str = ""
    required: bool | None = None
    example: Any = None
    allowable_values: tuple = ()
    read_only: bool = False
    hidden: bool = False


@dataclass(frozen=True)
class ApiParam:
    """Extra parameter metadata, used next to a location marker."""

    description: str = ""
    required: bool | None = None
    default: Any = None
    allowable_values: tuple = ()
    hidden: bool = False


@dataclass(frozen=True)
class ParamMarker:
    """Base for the ``Annotated`` markers binding a parameter to a location."""

    location: ClassVar[str] = ""

    name: str


class QueryParam(ParamMarker):
    location: ClassVar[str] = "query"


class PathParam(ParamMarker):
    location: ClassVar[str] = "path"


class HeaderParam(ParamMarker):
    location: ClassVar[str] = "header"


class CookieParam(ParamMarker):
    location: ClassVar[str] = "cookie"


class FormParam(ParamMarker):
    location: ClassVar[str] = "formData"
