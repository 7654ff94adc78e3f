"""Field meta declarations.

Record fields opt into promotion with an ``Annotated`` marker:

    class Article(BaseModel):
        cover: Annotated[str, Meta("uploaded_file=category:cover public:true")]
        body: Annotated[str, Meta("richtext")]

Declaration grammar: ``<category>[=<key>:<value>[ <key>:<value>...]]``
where category is one of uploaded_file, richtext, markdown. Several
categories may be listed comma-separated; the first recognized one wins.
"""

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

from .errors import MetaDeclarationError

logger = logging.getLogger(__name__)


class MetaType(str, Enum):
    """Storage category of an annotated field."""

    UPLOADED_FILE = "uploaded_file"
    RICHTEXT = "richtext"
    MARKDOWN = "markdown"

    @property
    def is_content(self) -> bool:
        """Whether values are text bodies with embedded URLs."""
        return self is not MetaType.UPLOADED_FILE


class Meta:
    """Annotation marker carrying a meta declaration string."""

    __slots__ = ("declaration",)

    def __init__(self, declaration: str):
        self.declaration = declaration

    def __repr__(self) -> str:
        return f"Meta({self.declaration!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Meta) and other.declaration == self.declaration

    def __hash__(self) -> int:
        return hash(self.declaration)


class MetaSpec(BaseModel):
    """Parsed meta declaration."""

    model_config = ConfigDict(frozen=True)

    meta_type: MetaType
    attrs: dict[str, str]


def _parse_attrs(raw: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for pair in raw.split():
        key, sep, value = pair.partition(":")
        if not sep or not key:
            logger.debug("Ignoring malformed meta attribute", extra={"pair": pair})
            continue
        attrs[key] = value
    return attrs


def parse_meta(declaration: str) -> MetaSpec:
    """
    Parse a meta declaration.

    Args:
        declaration: e.g. "uploaded_file=category:avatar public:true"

    Returns:
        MetaSpec with the winning category and ordered attributes

    Raises:
        MetaDeclarationError: No recognized category in the declaration
    """
    categories, _, raw_attrs = declaration.partition("=")

    chosen: MetaType | None = None
    for name in categories.split(","):
        name = name.strip()
        try:
            meta_type = MetaType(name)
        except ValueError:
            continue
        if chosen is None:
            chosen = meta_type
        elif meta_type is not chosen:
            logger.warning(
                f"Ignoring extra meta category {name!r}",
                extra={"declaration": declaration, "category": chosen.value},
            )

    if chosen is None:
        raise MetaDeclarationError(declaration)

    return MetaSpec(meta_type=chosen, attrs=_parse_attrs(raw_attrs))
