"""
EmmyLua annotation emitter.

Pipeline position: Stage 4 of 4 (Preprocessor → Extractor → Resolver → Emitter).
Input:  Hierarchy from the Resolver + documentation overrides
Output: annotation text, in this fixed order:
        1. namespace scaffolding for every global root
        2. enums (discovery order)
        3. classes with fields and function stubs (resolver order)
"""

from typing import Optional

from .schemas import Hierarchy, LuaClass, LuaEnum, LuaFunction, qualified_function_name
from .overrides import DocOverrides
from .type_mapper import GLOBAL_VARIABLES, NO_ANNOTATION_RETURN_TYPES, map_type, param_name
from .logger import get_module_logger

logger = get_module_logger("emitter")

USER_COMMENTS_HEADER = "---\n--- User comments:\n"


def build_namespace_tree(names: list[str]) -> dict:
    """Nested dict of dotted-name segments, e.g. "A.B" → {"A": {"B": {}}}."""
    tree: dict = {}
    for name in names:
        node = tree
        for segment in name.split("."):
            node = node.setdefault(segment, {})
    return tree


def _one_line(text: str) -> str:
    return " ".join(text.splitlines())


def _join(*parts: str) -> str:
    return " ".join(part.strip() for part in parts if part and part.strip())


def _annotation_comment(comment: str) -> str:
    return f" @{comment}" if comment else ""


class Emitter:
    """Renders a resolved Hierarchy as EmmyLua annotations."""

    def __init__(self, overrides: Optional[DocOverrides] = None):
        self.overrides = overrides or DocOverrides()

    def emit(self, hierarchy: Hierarchy) -> str:
        out: list[str] = []

        self.emit_namespaces(build_namespace_tree(hierarchy.global_roots), out)
        for lua_enum in hierarchy.enums:
            self.emit_enum(lua_enum, is_class=lua_enum.type in hierarchy.class_map, out=out)
        for lua_class in hierarchy.classes:
            self.emit_class(lua_class, out)

        logger.info(
            f"Emitted {len(hierarchy.enums)} enums and {len(hierarchy.classes)} classes"
        )
        return "".join(out)

    def emit_namespaces(self, tree: dict, out: list[str], prefix: tuple = ()) -> None:
        """
        One table per namespace node, nested tables as constructor entries:

            ---@class ARDOUR
            ARDOUR = {
            	---@class ARDOUR.LuaAPI
            	LuaAPI = {
            	}
            }
        """
        indent = "\t" * len(prefix)
        segments = sorted(tree)
        for position, segment in enumerate(segments):
            path = prefix + (segment,)
            out.append(f"{indent}---@class {'.'.join(path)}\n")
            out.append(f"{indent}{segment} = {{\n")
            self.emit_namespaces(tree[segment], out, path)
            last = position == len(segments) - 1
            out.append(indent + ("}\n" if not prefix or last else "},\n"))

    def emit_enum(self, lua_enum: LuaEnum, is_class: bool, out: list[str]) -> None:
        """
        A true enum gets its own type; values of a type that is also a class
        are plain constants pointing at that class.
        """
        enum_type = lua_enum.type
        if is_class:
            for value in lua_enum.values:
                out.append("---This is a constant/enum.\n")
                out.append(f"---@see {enum_type}\n")
                out.append(f"{value} = {{}}\n\n")
            return

        out.append("---This is an enum which can take one of the following values:\n")
        out.extend(f"--- * **{value}**\n" for value in lua_enum.values)
        out.extend(f"---@see {value}\n" for value in lua_enum.values)
        out.append(f"---@class {enum_type}\n")
        out.append(f"{enum_type} = {{}}\n\n")

        for value in lua_enum.values:
            out.append("---This is an enum value of the following enum:\n")
            out.append(f"--- **{enum_type}**\n")
            out.append(f"---@see {enum_type}\n")
            out.append(f"---@type {enum_type}\n")
            out.append(f"{value} = {{}}\n\n")

    def emit_class(self, lua_class: LuaClass, out: list[str]) -> None:
        self._doc(lua_class.doc, self.overrides.class_doc(lua_class.name), out)

        base = f" : {lua_class.base_class_name}" if lua_class.base_class_name else ""
        out.append(f"---@class {lua_class.name}{base}\n")
        for field in lua_class.fields:
            mapping = map_type(field.type)
            comment = _join(mapping.comment, _one_line(field.doc))
            out.append(f"---@field {field.name} {mapping.lua_type}{_annotation_comment(comment)}\n")

        # Dotted names live inside their namespace table
        if lua_class.name in GLOBAL_VARIABLES or "." in lua_class.name:
            out.append(f"{lua_class.name} = {{}}\n")
        else:
            out.append(f"local {lua_class.name} = {{}}\n")

        for function in lua_class.functions:
            self.emit_function(lua_class, function, out)
        out.append("\n")

    def emit_function(self, owner: LuaClass, function: LuaFunction, out: list[str]) -> None:
        full_name = qualified_function_name(owner, function.name, function.is_constructor)
        self._doc(function.doc, self.overrides.function_doc(full_name), out)

        names = []
        for index, argument in enumerate(function.arguments):
            name = argument.name or param_name(argument.type, index)
            names.append(name)
            mapping = map_type(argument.type)
            comment = _join(mapping.comment, _one_line(argument.doc))
            out.append(f"---@param {name} {mapping.lua_type}{_annotation_comment(comment)}\n")

        if function.return_type not in NO_ANNOTATION_RETURN_TYPES:
            mapping = map_type(function.return_type)
            lua_type = owner.name if function.is_constructor else mapping.lua_type
            comment = _join(mapping.comment, _one_line(function.return_doc))
            out.append(f"---@return {lua_type}{_annotation_comment(comment)}\n")

        out.append(f"function {full_name}({', '.join(names)}) end\n\n")

    def _doc(self, doc: str, user_doc: Optional[str], out: list[str]) -> None:
        """Scraped doc lines, then the override text under a "User comments" marker."""
        if doc.strip():
            out.extend(f"---{line}\n" for line in doc.splitlines())
        if user_doc is not None:
            out.append(USER_COMMENTS_HEADER)
            out.extend(f"---{line}\n" for line in user_doc.splitlines())


def emit(hierarchy: Hierarchy, overrides: Optional[DocOverrides] = None) -> str:
    """Convenience function to render a resolved hierarchy."""
    return Emitter(overrides).emit(hierarchy)
