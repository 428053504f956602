"""
Pydantic schemas for the entities scraped from the Lua class reference.

Data flow through the pipeline:
  Extractor → ExtractionResult (flat LuaClass / LuaEnum lists)
  Resolver  → Hierarchy (same objects, linked into a tree)
  Emitter   → annotation text

Parent links are stored as the parent's *name*, never as an object, so
ownership only flows from parent to child (nested_classes / nested_enums)
and the model graph stays a tree.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .exceptions import StructureError


class ClassKind(str, Enum):
    """Kind of a class definition; the value is its CSS marker class."""
    NAMESPACE = "freeclass"
    CLASS = "class"
    POINTER_CLASS = "pointerclass"
    OPAQUE_OBJECT = "opaque"
    ARRAY = "array"

    @property
    def css_class(self) -> str:
        return self.value


class LuaField(BaseModel):
    """A data member or a function parameter."""
    name: Optional[str] = None   # None for anonymous parameters
    type: str                    # Raw source-type token, e.g. "unsigned int&"
    doc: str = ""


class LuaFunction(BaseModel):
    """
    A function row of a class members table.

    Two functions are equal when their signatures match: name, return type
    and the ordered argument types. Docs and parameter names do not count,
    so the same overload listed twice collapses to one.
    """
    name: str
    return_type: Optional[str] = None   # None marks a constructor
    arguments: list[LuaField] = Field(default_factory=list)
    doc: str = ""
    return_doc: str = ""

    @property
    def is_constructor(self) -> bool:
        return self.return_type is None

    @property
    def signature(self) -> tuple:
        return (self.name, self.return_type, tuple(arg.type for arg in self.arguments))

    def __eq__(self, other) -> bool:
        if not isinstance(other, LuaFunction):
            return NotImplemented
        return self.signature == other.signature

    def __hash__(self) -> int:
        return hash(self.signature)

    def __str__(self) -> str:
        return f"{self.return_type} {self.name}"


class LuaEnum(BaseModel):
    """An enum (or constant group) from the "Enum/Constants" section."""
    type: str
    values: list[str] = Field(default_factory=list)
    parent: Optional[str] = None   # Name of the owning LuaClass

    @field_validator("values")
    @classmethod
    def strip_trailing_separator(cls, values: list[str]) -> list[str]:
        # List items are rendered as "NAME," except the last one
        return [value[:-1] if value.endswith(",") else value for value in values]


class LuaClass(BaseModel):
    """A namespace, class, pointer class, opaque object or array."""
    name: str                      # Dotted path, unique across the document
    kind: ClassKind
    base_class_name: str = ""
    fields: list[LuaField] = Field(default_factory=list)
    functions: list[LuaFunction] = Field(default_factory=list)
    doc: str = ""
    parent: Optional[str] = None   # Name of the owning LuaClass

    # Filled by the Resolver
    nested_classes: list["LuaClass"] = Field(default_factory=list)
    nested_enums: list[LuaEnum] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_opaque_is_empty(self) -> "LuaClass":
        if self.kind == ClassKind.OPAQUE_OBJECT and (
            self.fields or self.functions or self.base_class_name
        ):
            raise ValueError(f"Opaque object {self.name} cannot have members or a base class")
        return self

    @property
    def is_namespace(self) -> bool:
        return self.kind == ClassKind.NAMESPACE

    @property
    def is_opaque(self) -> bool:
        return self.kind == ClassKind.OPAQUE_OBJECT

    def __str__(self) -> str:
        functions = ", ".join(str(function) for function in self.functions)
        return f"Class: {self.name}\n\tFunctions: {functions}\n\t"


# --- Pipeline contracts ---

class ExtractionResult(BaseModel):
    """Output from the Extractor: flat entities in discovery order."""
    classes: list[LuaClass] = Field(default_factory=list)
    enums: list[LuaEnum] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)  # Soft anomalies skipped during extraction


class Hierarchy(BaseModel):
    """Output from the Resolver, consumed by the Emitter."""
    classes: list[LuaClass] = Field(default_factory=list)   # Sorted by name length (stable)
    enums: list[LuaEnum] = Field(default_factory=list)      # Discovery order
    class_map: dict[str, LuaClass] = Field(default_factory=dict)
    global_roots: list[str] = Field(default_factory=list)   # Dotted names seeding the namespace tree


LuaClass.model_rebuild()


def qualified_function_name(
    owner: Optional[LuaClass],
    function_name: str,
    constructor: bool = False
) -> str:
    """
    Name a function is declared under in the annotations.

    Constructors are named after their class; members of a namespace are
    addressed as "Ns.fn", members of an instance class as "Class:fn".
    """
    if constructor:
        if owner is None or owner.is_namespace:
            raise StructureError(
                f"Constructor {function_name} has no instantiable owner",
                element=owner.name if owner else None
            )
        return owner.name
    if owner is None:
        return function_name
    return owner.name + ("." if owner.is_namespace else ":") + function_name
