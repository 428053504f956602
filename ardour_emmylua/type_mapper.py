"""
C++/Lua-binding type tokens → EmmyLua annotation types.

The mapping is one ordered rule table over the trimmed token; the first rule
that matches wins and anything unmatched is treated as a class name
(namespace separators turned into dots).
"""

import re
from typing import Callable, NamedTuple, Optional

# The two top-level entry points of the Lua bindings are exposed as globals
# under short names instead of their qualified class names.
GLOBAL_REMAP = {
    "ARDOUR.Session": "Session",
    "ArdourUI.Editor": "Editor",
}
GLOBAL_VARIABLES = frozenset(GLOBAL_REMAP.values())

# Return types that get no ---@return line
NO_ANNOTATION_RETURN_TYPES = frozenset({"void", "..."})

CONSTRUCTOR_COMMENT = "(This is a constructor)"
LUA_ITER_COMMENT = "(LuaIter - an iterator for the collection)"
LUA_TABLE_COMMENT = "(LuaTable)"

FALLBACK_PARAM_NAME = "arg"

NAME_SEPARATOR_PATTERN = re.compile(r'[^0-9A-Za-z_]+')


class TypeMapping(NamedTuple):
    lua_type: Optional[str]   # None only for constructors
    comment: str


class TypeRule(NamedTuple):
    matches: Callable[[str], bool]
    lua_type: str


def _exact(*tokens: str) -> Callable[[str], bool]:
    accepted = frozenset(tokens)
    return lambda token: token in accepted


def _exact_or_prefix(token_name: str) -> Callable[[str], bool]:
    return lambda token: token == token_name or token.startswith(token_name + " {")


def _numeric(*bases: str) -> Callable[[str], bool]:
    return _exact(*bases, *(base + "&" for base in bases))


TYPE_RULES = (
    TypeRule(_exact("bool", "bool&"), "boolean"),
    TypeRule(_exact("std::string", "char*", "unsigned char*", "char", "unsigned char"), "string"),
    TypeRule(
        _numeric(
            "short", "unsigned short", "int", "unsigned int",
            "long", "unsigned long", "float", "double",
        ),
        "number",
    ),
    TypeRule(lambda token: token == "--lua--" or token[:1].isdigit(), "unknown"),
    TypeRule(_exact("void*"), "userdata"),
    TypeRule(_exact("Lua-Function", "LuaIter"), "function"),
    TypeRule(_exact_or_prefix("LuaTable"), "table"),
    TypeRule(_exact_or_prefix("LuaMetaTable"), "table"),
)


def qualify(token: str) -> str:
    """Class-name form of a token: separators to dots, global names shortened."""
    result = token.strip().replace("::", ".").replace(":", ".")
    return GLOBAL_REMAP.get(result, result)


def to_lua_type(token: str) -> str:
    stripped = token.strip()
    for rule in TYPE_RULES:
        if rule.matches(stripped):
            return rule.lua_type
    return qualify(stripped)


def type_comment(token: Optional[str], lua_type: Optional[str]) -> str:
    """Human-readable note for lossy mappings; empty when nothing was lost."""
    if token is None:
        return CONSTRUCTOR_COMMENT
    if token == "LuaIter":
        return LUA_ITER_COMMENT
    if token == "LuaTable":
        return LUA_TABLE_COMMENT
    if token == lua_type:
        return ""
    return f"(C type: {token})"


def map_type(token: Optional[str]) -> TypeMapping:
    """
    Map a source type token to its annotation type and comment.

    A None token stands for a constructor's return type; the caller supplies
    the owning class name as the type.
    """
    if token is None:
        return TypeMapping(None, CONSTRUCTOR_COMMENT)
    lua_type = to_lua_type(token)
    return TypeMapping(lua_type, type_comment(token, lua_type))


def param_name(token: str, index: int) -> str:
    """
    Fallback name for an unnamed parameter, derived from its type.

    "int" at index 0 gives "int1", "ARDOUR:Route" at index 1 gives "route2".
    """
    base = qualify(token)
    brace = base.find("{")
    if brace != -1:
        base = base[:brace].strip()
    base = base[base.rfind(".") + 1:].rstrip("&*")

    words = [word for word in NAME_SEPARATOR_PATTERN.split(base) if word]
    if not words or words[0][0].isdigit():
        words = [FALLBACK_PARAM_NAME]
    camel = words[0][0].lower() + words[0][1:] + "".join(
        word[0].upper() + word[1:] for word in words[1:]
    )
    return f"{camel}{index + 1}"
