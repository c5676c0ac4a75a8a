"""
Parameter Bindings

Markers placed inside ``typing.Annotated`` to bind handler parameters to
parts of the incoming request:

    @Get("/:id")
    async def show(
        self,
        id: Annotated[str, Param("id")],
        filters: Annotated[dict, Query()],
        ctx: Annotated[Context, RawContext()],
    ):
        ...

The binding index is the parameter's position after ``self``.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union, get_args, get_origin, get_type_hints

from .faults import DuplicateBindingFault, UnresolvedAnnotationFault, UnsupportedSignatureFault

Extractor = Callable[[Any], Union[Any, Awaitable[Any]]]


class BindingKind(str, Enum):
    RAW_CONTEXT = "raw_context"
    BODY = "body"
    QUERY = "query"
    PARAM = "param"
    CUSTOM = "custom"


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass(frozen=True)
class ParameterBinding:
    """
    Rule for extracting one handler argument from a request.

    Attributes:
        kind: Where the value comes from
        index: Parameter position (``self`` excluded)
        name: Python parameter name
        slug: Path-segment name for PARAM bindings
        schema: Opaque schema reference for BODY/QUERY bindings
        extractor: Callable for CUSTOM bindings
    """
    kind: BindingKind
    index: int
    name: str = ""
    slug: Optional[str] = None
    schema: Any = None
    extractor: Optional[Extractor] = None


class BindingMarker:
    """Base class for ``Annotated`` binding markers."""

    kind: BindingKind

    def bind(self, index: int, name: str) -> ParameterBinding:
        return ParameterBinding(kind=self.kind, index=index, name=name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class RawContext(BindingMarker):
    """Pass the request context through unchanged."""

    kind = BindingKind.RAW_CONTEXT


class Body(BindingMarker):
    """Pass the parsed request body verbatim."""

    kind = BindingKind.BODY

    def __init__(self, schema: Any = None):
        self.schema = schema

    def bind(self, index: int, name: str) -> ParameterBinding:
        return ParameterBinding(kind=self.kind, index=index, name=name, schema=self.schema)


class Query(Body):
    """Pass the query parameters verbatim."""

    kind = BindingKind.QUERY


class Param(BindingMarker):
    """Look up one path segment by name."""

    kind = BindingKind.PARAM

    def __init__(self, slug: str):
        self.slug = slug

    def bind(self, index: int, name: str) -> ParameterBinding:
        return ParameterBinding(kind=self.kind, index=index, name=name, slug=self.slug)

    def __repr__(self) -> str:
        return f"Param({self.slug!r})"


class CustomParam(BindingMarker):
    """Invoke an extractor with the request context and await its result."""

    kind = BindingKind.CUSTOM

    def __init__(self, extractor: Extractor):
        self.extractor = extractor

    def bind(self, index: int, name: str) -> ParameterBinding:
        return ParameterBinding(kind=self.kind, index=index, name=name, extractor=self.extractor)

    def __repr__(self) -> str:
        return f"CustomParam({getattr(self.extractor, '__name__', self.extractor)!r})"


def create_param_decorator(extractor: Extractor) -> Callable[[], CustomParam]:
    """
    Build a reusable marker factory around a custom extractor.

    Example:
        CurrentUser = create_param_decorator(lambda ctx: ctx.store.get("user"))

        @Get("/me")
        async def me(self, user: Annotated[dict, CurrentUser()]):
            return user
    """
    def marker() -> CustomParam:
        return CustomParam(extractor)

    marker.__name__ = getattr(extractor, "__name__", "custom_param")
    return marker


def extract_bindings(func: Callable) -> List[ParameterBinding]:
    """
    Read the binding markers from a handler's signature.

    Returns bindings ordered by index. A parameter carrying more than one
    marker raises ``DuplicateBindingFault``. Positional-only and ``*args``
    parameters raise ``UnsupportedSignatureFault``.
    """
    hints = _type_hints(func)
    params = [
        p for p in inspect.signature(func).parameters.values()
        if p.name not in ("self", "cls")
    ]

    bindings = []
    for index, param in enumerate(params):
        if param.kind is param.POSITIONAL_ONLY:
            raise UnsupportedSignatureFault(func.__qualname__, param.name, "positional-only")
        if param.kind is param.VAR_POSITIONAL:
            raise UnsupportedSignatureFault(func.__qualname__, param.name, "variadic positional")

        annotation = hints.get(param.name, param.annotation)
        markers = _markers_of(annotation)
        if len(markers) > 1:
            raise DuplicateBindingFault(
                func.__qualname__, index, [m.kind.value for m in markers]
            )
        if markers:
            bindings.append(markers[0].bind(index, param.name))

    return bindings


def _type_hints(func: Callable) -> Dict[str, Any]:
    try:
        return get_type_hints(func, include_extras=True)
    except NameError:
        pass

    # Some annotation is undefined at runtime (TYPE_CHECKING imports,
    # local classes); resolve the others one at a time.
    hints = {}
    for name, annotation in getattr(func, "__annotations__", {}).items():
        if not isinstance(annotation, str):
            hints[name] = annotation
            continue
        try:
            hints[name] = eval(annotation, func.__globals__)
        except NameError as e:
            if "Annotated" in annotation:
                raise UnresolvedAnnotationFault(func.__qualname__, name, e) from e
    return hints


def _markers_of(annotation: Any) -> List[BindingMarker]:
    # Python 3.10 wraps annotations of None-defaulted params in Optional
    if get_origin(annotation) is Union:
        for arg in get_args(annotation):
            markers = _markers_of(arg)
            if markers:
                return markers
        return []
    metadata = getattr(annotation, "__metadata__", ())
    return [arg for arg in metadata if isinstance(arg, BindingMarker)]


def parameter_names(func: Callable) -> List[str]:
    """Parameter names of a handler in positional order, ``self`` excluded."""
    return [
        p.name for p in inspect.signature(func).parameters.values()
        if p.name not in ("self", "cls")
    ]
