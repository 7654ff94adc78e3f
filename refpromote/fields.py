"""Field descriptor scanner.

Introspects a record type (pydantic model or dataclass) once and builds
a descriptor per field carrying a Meta declaration. Descriptors adapt
every supported field shape to a plain list of possibly-absent strings,
so the promoter never has to care how a field is declared.

Supported shapes:
    str, str | None                    all categories
    list[str], list[str | None]        uploaded_file only
    list[...] | None                   uploaded_file only
"""

import dataclasses
import logging
import types
from functools import lru_cache
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ConfigDict, Field

from .errors import MetaDeclarationError
from .meta import Meta, MetaType, parse_meta
from .types import FieldName

logger = logging.getLogger(__name__)


class FieldDescriptor(BaseModel):
    """Metadata and accessors for one annotated record field."""

    model_config = ConfigDict(frozen=True)

    name: FieldName
    meta_type: MetaType
    is_array: bool = False
    nullable: bool = False
    attrs: dict[str, str] = Field(default_factory=dict)

    def read(self, record: Any) -> list[str | None]:
        """Read the field as a list (empty when unset)."""
        value = getattr(record, self.name, None)
        if value is None:
            return []
        if self.is_array:
            return list(value)
        return [value]

    def candidates(self, record: Any) -> list[str]:
        """Read the field, dropping absent and blank values."""
        return [v for v in self.read(record) if v is not None and v.strip()]

    def write(self, record: Any, values: list[str]) -> None:
        """Write values back to the field.

        Single-value fields take the first value; an empty list clears
        the field to None (nullable) or "".
        """
        if self.is_array:
            setattr(record, self.name, list(values))
        elif values:
            setattr(record, self.name, values[0])
        else:
            setattr(record, self.name, None if self.nullable else "")


def _unwrap_annotated(tp: Any) -> tuple[Any, list[Meta]]:
    if get_origin(tp) is Annotated:
        base, *extras = get_args(tp)
        return base, [x for x in extras if isinstance(x, Meta)]
    return tp, []


def _unwrap_optional(tp: Any) -> tuple[Any, bool, list[Meta]]:
    if get_origin(tp) in (Union, types.UnionType):
        args = get_args(tp)
        rest = [a for a in args if a is not type(None)]
        if len(rest) == 1 and len(rest) < len(args):
            inner, metas = _unwrap_annotated(rest[0])
            return inner, True, metas
    return tp, False, []


def _analyze(tp: Any) -> tuple[bool | None, bool, list[Meta]]:
    """Classify a field annotation.

    Returns (is_array, nullable, metas); is_array is None when the
    shape is not text-like at all.
    """
    tp, metas = _unwrap_annotated(tp)
    tp, nullable, inner_metas = _unwrap_optional(tp)
    metas.extend(inner_metas)

    if tp is str:
        return False, nullable, metas

    if get_origin(tp) is list:
        args = get_args(tp)
        if len(args) == 1:
            elem, _ = _unwrap_annotated(args[0])
            elem, _, _ = _unwrap_optional(elem)
            if elem is str:
                return True, nullable, metas

    return None, nullable, metas


def _iter_fields(record_type: type) -> list[tuple[str, Any, list[Meta]]]:
    """List (name, annotation, metas) for each field in declaration order."""
    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        return [
            (name, info.annotation, [m for m in info.metadata if isinstance(m, Meta)])
            for name, info in record_type.model_fields.items()
        ]

    if isinstance(record_type, type) and dataclasses.is_dataclass(record_type):
        hints = get_type_hints(record_type, include_extras=True)
        return [
            (f.name, hints.get(f.name, f.type), [])
            for f in dataclasses.fields(record_type)
        ]

    return []


def _build_descriptor(
    name: str, annotation: Any, metas: list[Meta]
) -> FieldDescriptor | None:
    is_array, nullable, found = _analyze(annotation)
    metas = metas + found
    if not metas:
        return None

    spec = None
    for meta in metas:
        try:
            parsed = parse_meta(meta.declaration)
        except MetaDeclarationError:
            logger.debug(
                "Skipping unrecognized meta declaration",
                extra={"field": name, "declaration": meta.declaration},
            )
            continue
        if spec is None:
            spec = parsed
        elif parsed.meta_type is not spec.meta_type:
            logger.warning(
                f"Field {name!r} declares several meta categories, "
                f"using {spec.meta_type.value!r}",
                extra={"field": name},
            )

    if spec is None:
        return None

    if is_array is None or (is_array and spec.meta_type.is_content):
        logger.debug(
            "Skipping field with unsupported shape",
            extra={"field": name, "meta_type": spec.meta_type.value},
        )
        return None

    return FieldDescriptor(
        name=name,
        meta_type=spec.meta_type,
        is_array=is_array,
        nullable=nullable,
        attrs=spec.attrs,
    )


def scan_fields(record_type: Any) -> tuple[FieldDescriptor, ...]:
    """
    Build descriptors for all promotable fields of a record type.

    Results are cached per type. Fields with no recognized category, or
    whose shape does not fit their category, are skipped.

    Args:
        record_type: pydantic model class or dataclass type

    Returns:
        Descriptors in field declaration order (empty for non-record types)
    """
    if not isinstance(record_type, type):
        return ()
    return _scan_type(record_type)


@lru_cache(maxsize=None)
def _scan_type(record_type: type) -> tuple[FieldDescriptor, ...]:
    descriptors = []
    for name, annotation, metas in _iter_fields(record_type):
        descriptor = _build_descriptor(name, annotation, metas)
        if descriptor is not None:
            descriptors.append(descriptor)
    return tuple(descriptors)
