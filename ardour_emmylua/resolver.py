"""
Hierarchy resolution for the scraped entities.

Pipeline position: Stage 3 of 4 (Preprocessor → Extractor → Resolver → Emitter).
Input:  flat LuaClass / LuaEnum lists in discovery order
Output: Hierarchy (classes linked by dotted-name prefix, enums attached to
        their owning classes, global namespace roots)
"""

from typing import Iterable, Optional, Union

from .schemas import ExtractionResult, Hierarchy, LuaClass, LuaEnum
from .exceptions import StructureError
from .logger import get_module_logger

logger = get_module_logger("resolver")


def namespace_of(name: str) -> Optional[str]:
    """Dotted name without its last segment; None for a top-level name."""
    index = name.rfind(".")
    return None if index == -1 else name[:index]


class Resolver:
    """Links flat entities into a namespace tree."""

    def resolve(
        self,
        classes: Union[ExtractionResult, Iterable[LuaClass]],
        enums: Iterable[LuaEnum] = ()
    ) -> Hierarchy:
        """
        Attach nested classes and enums to their owners.

        Args:
            classes: ExtractionResult, or classes in discovery order
            enums: Enums in discovery order (ignored for an ExtractionResult)

        Returns:
            Hierarchy whose classes are sorted by name length

        Raises:
            StructureError: two classes share a name
        """
        if isinstance(classes, ExtractionResult):
            classes, enums = classes.classes, classes.enums

        # A parent's name is strictly shorter than its children's, so it is
        # registered before any of them; sorted() keeps ties in discovery order.
        lua_classes = sorted(classes, key=lambda lua_class: len(lua_class.name))
        class_map: dict[str, LuaClass] = {}

        for lua_class in lua_classes:
            if lua_class.name in class_map:
                raise StructureError(f"Duplicate class name: {lua_class.name}", element=lua_class.name)
            namespace = namespace_of(lua_class.name)
            parent = class_map.get(namespace) if namespace is not None else None
            if parent is not None:
                parent.nested_classes.append(lua_class)
                lua_class.parent = parent.name
            class_map[lua_class.name] = lua_class

        lua_enums = list(enums)
        for lua_enum in lua_enums:
            namespace = namespace_of(lua_enum.type)
            parent = class_map.get(namespace) if namespace is not None else None
            if parent is not None:
                parent.nested_enums.append(lua_enum)
                lua_enum.parent = parent.name

        global_roots = self.global_roots(lua_classes, lua_enums)
        logger.info(
            f"Resolved {len(lua_classes)} classes, {len(lua_enums)} enums, "
            f"{len(global_roots)} global roots"
        )
        return Hierarchy(
            classes=lua_classes,
            enums=lua_enums,
            class_map=class_map,
            global_roots=global_roots
        )

    def global_roots(self, lua_classes: list[LuaClass], lua_enums: list[LuaEnum]) -> list[str]:
        """
        Dotted names that need namespace scaffolding.

        Every enum's namespace and its values' namespaces, plus every top-level
        class's own name (namespaces) or its namespace (anything else).
        """
        candidates = []
        for lua_enum in lua_enums:
            candidates.append(namespace_of(lua_enum.type))
            candidates.extend(namespace_of(value) for value in lua_enum.values)
        for lua_class in lua_classes:
            if lua_class.parent is None:
                candidates.append(
                    lua_class.name if lua_class.is_namespace else namespace_of(lua_class.name)
                )
        return list(dict.fromkeys(name for name in candidates if name is not None))


def resolve(
    classes: Union[ExtractionResult, Iterable[LuaClass]],
    enums: Iterable[LuaEnum] = ()
) -> Hierarchy:
    """Convenience function to resolve the entity hierarchy."""
    return Resolver().resolve(classes, enums)
