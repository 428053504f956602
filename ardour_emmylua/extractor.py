"""
Rule-based entity extractor for the Lua class reference page.

Pipeline position: Stage 2 of 4 (Preprocessor → Extractor → Resolver → Emitter).
Input:  parsed document whose #luaref container holds the reference
Output: ExtractionResult with flat LuaClass / LuaEnum lists + warnings

Layout of the reference container (all elements are siblings):

    <h3 class="cls pointerclass" id="ARDOUR:Route">   class heading
    <p class="classinfo">is-a: <a href="#...">...</a>  optional base class
    <div class="classdox">...</div>                    optional class doc
    <table class="classmembers">                       members table
      <tr><th>Methods</th></tr>
      <tr><td class="def">..</td><td class="decl"><span class="functionname">..
      <tr><td class="doc"><div class="dox">..</div></td></tr>   member doc row
      <tr><th>Data Members</th></tr>
      ...
    <h3 ...>                                           next class
    ...
    <h2>Enum/Constants</h2>
    <h3 class="enum" id="ARDOUR.TrackMode">
    <ul class="enum"><li class="const">ARDOUR.TrackMode.Normal,</li>...</ul>
"""

from typing import Optional, Union

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .schemas import (
    ClassKind, ExtractionResult, LuaClass, LuaEnum, LuaField, LuaFunction,
    qualified_function_name,
)
from .overrides import DocOverrides
from .siblings import (
    child, element_children, find_sibling, has_class, is_tag,
    next_element_sibling, scan, text_of,
)
from .type_mapper import GLOBAL_REMAP, qualify
from .exceptions import StructureError
from .logger import get_module_logger

logger = get_module_logger("extractor")

REFERENCE_CONTAINER = "#luaref"
LONG_POINTER_SUFFIX = "<long>*"
DATA_MEMBERS_TITLE = "Data Members"
ENUM_SECTION_TITLE = "Enum/Constants"
IS_A_MARKER = "is-a:"

# ℂ marks a constructor, ℵ a nil-pointer constructor
CONSTRUCTOR_GLYPHS = frozenset({"ℂ", "ℵ"})
NIL_POINTER_CONSTRUCTOR_TITLE = "Nil Pointer Constructor"

PARAM_NAME_PREFIX = "param-name-index-"
PARAM_DESCR_PREFIX = "param-descr-index-"

# Parameter names that would not compile as Lua identifiers
LUA_KEYWORDS = frozenset({
    "and", "break", "do", "else", "elseif", "end", "false", "for", "function",
    "goto", "if", "in", "local", "nil", "not", "or", "repeat", "return",
    "then", "true", "until", "while",
})


# --- Identifier helpers ---

def id_to_lua_type(identifier: str) -> str:
    """Turn an element id such as "ARDOUR:Route" into "ARDOUR.Route"."""
    if not identifier:
        raise StructureError("Element without an id where a type name was expected")
    if identifier.endswith(LONG_POINTER_SUFFIX):
        identifier = identifier[:-len(LONG_POINTER_SUFFIX)]
    return identifier[identifier.rfind(" ") + 1:].replace("::", ".").replace(":", ".")


def class_name_from_id(identifier: str) -> str:
    # The top-level entry points are ARDOUR:Session and ArdourUI:Editor
    lua_type = id_to_lua_type(identifier)
    return GLOBAL_REMAP.get(lua_type, lua_type)


def enum_type_from_id(identifier: str) -> str:
    if not identifier:
        raise StructureError("Enum heading without an id")
    if identifier.endswith(LONG_POINTER_SUFFIX):
        return identifier[:-len(LONG_POINTER_SUFFIX)]
    return identifier


def adjust_param_name(name: str) -> str:
    return name + "_" if name in LUA_KEYWORDS else name


# --- Element predicates ---

def _is_h3(element: Tag) -> bool:
    return is_tag(element, "h3")


def _class_kind(element: Tag) -> Optional[ClassKind]:
    return next((kind for kind in ClassKind if has_class(element, kind.css_class)), None)


def _is_class_heading(element: Tag) -> bool:
    return _is_h3(element) and _class_kind(element) is not None


def _is_enum_heading(element: Tag) -> bool:
    return _is_h3(element) and has_class(element, "enum")


def _is_enum_section_title(element: Tag) -> bool:
    return is_tag(element, "h2") and text_of(element) == ENUM_SECTION_TITLE


def _is_data_members_row(row: Tag) -> bool:
    return text_of(row) == DATA_MEMBERS_TITLE


def _is_member_row(row: Tag) -> bool:
    cells = element_children(row)
    return len(cells) > 1 and has_class(cells[0], "def") and has_class(cells[1], "decl")


def _is_function_row(row: Tag) -> bool:
    return _is_member_row(row) and has_class(child(child(row, 1), 0), "functionname")


def _is_param_list(element: Tag) -> bool:
    return is_tag(element, "dl") and has_class(child(element, 0), PARAM_NAME_PREFIX + "0")


def _result_discussion_problem(element: Tag) -> Optional[str]:
    """None for a well-formed result discussion, else what is unexpected."""
    paragraphs = element_children(element)
    if len(paragraphs) != 1:
        return "result-discussion"
    if not has_class(paragraphs[0], "para-returns"):
        return "para-returns"
    if not has_class(child(paragraphs[0], 0), "word-returns"):
        return "word-returns"
    return None


def _is_result_discussion(element: Tag) -> bool:
    return has_class(element, "result-discussion") and _result_discussion_problem(element) is None


def _is_constructor(def_cell: Optional[Tag]) -> bool:
    if def_cell is None:
        return False
    if text_of(def_cell) in CONSTRUCTOR_GLYPHS:
        return True
    marker = child(def_cell, 0)
    return any(
        element is not None and element.get("title") == NIL_POINTER_CONSTRUCTOR_TITLE
        for element in (def_cell, marker)
    )


def _type_token(element: Optional[Tag]) -> str:
    """Type named by a def/argument element; links name their target id."""
    if element is None:
        return ""
    if element.name == "a":
        href = element.get("href", "")
        if href.startswith("#") and len(href) > 1:
            return id_to_lua_type(href[1:])
    return text_of(element)


class Extractor:
    """Extracts classes and enums from the Lua class reference."""

    def __init__(self, overrides: Optional[DocOverrides] = None):
        self.overrides = overrides or DocOverrides()
        self._warnings: list[str] = []

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self._warnings.append(message)

    def extract(self, document: Union[BeautifulSoup, Tag, str]) -> ExtractionResult:
        """
        Extract flat entity lists from the reference page.

        Args:
            document: Parsed document (or raw HTML, parsed with html5lib)

        Returns:
            ExtractionResult with classes and enums in discovery order

        Raises:
            StructureError: the markup does not have the expected shape
        """
        self._warnings = []
        if isinstance(document, str):
            document = BeautifulSoup(document, 'html5lib')

        logger.info("Starting extraction")
        sections = self._reference_sections(document)
        if not sections:
            self._warn(f"No {REFERENCE_CONTAINER} container content found")

        classes = [self.extract_class(element) for element in sections if _is_class_heading(element)]
        enums = self.extract_enums(sections)

        logger.info(f"Extracted {len(classes)} classes and {len(enums)} enums")
        return ExtractionResult(classes=classes, enums=enums, warnings=list(self._warnings))

    def _reference_sections(self, document: Tag) -> list[Tag]:
        sections = []
        for container in document.select(REFERENCE_CONTAINER):
            sections.extend(element_children(container))
        return sections

    # --- Classes ---

    def extract_class(self, element: Tag) -> LuaClass:
        """Build a LuaClass from its heading and the siblings up to the next heading."""
        identifier = element.get("id", "")
        kind = _class_kind(element)
        if kind is None:
            raise StructureError("Class heading without a kind marker", element=identifier)

        name = class_name_from_id(identifier)
        doc = self._class_doc(element)
        if kind == ClassKind.OPAQUE_OBJECT:
            logger.debug(f"Opaque object: {name}")
            return LuaClass(name=name, kind=kind, doc=doc)

        lua_class = LuaClass(
            name=name,
            kind=kind,
            base_class_name=self._base_class(element),
            doc=doc
        )

        members_table = find_sibling(
            element,
            lambda sibling: has_class(sibling, "classmembers"),
            stop=_is_h3
        )
        if members_table is None:
            raise StructureError(f"Can't find class members for {identifier}", element=identifier)

        rows = members_table.select("tr")
        lua_class.fields = self._fields(rows)
        lua_class.functions = self._functions(lua_class, rows)
        logger.debug(
            f"Class {name}: {len(lua_class.fields)} fields, {len(lua_class.functions)} functions"
        )
        return lua_class

    def _base_class(self, element: Tag) -> str:
        info = find_sibling(element, lambda sibling: has_class(sibling, "classinfo"), stop=_is_h3)
        if info is None:
            return ""

        identifier = element.get("id")
        texts = [
            str(node).strip() for node in info.children
            if isinstance(node, NavigableString) and not isinstance(node, Comment)
            and str(node).strip()
        ]
        if len(texts) != 1:
            raise StructureError("Expected a text in classinfo", element=identifier)
        if texts[0] != IS_A_MARKER:
            raise StructureError(f"Expected '{IS_A_MARKER}' but was: {texts[0]}", element=identifier)

        links = info.select("a")
        if len(links) != 1:
            raise StructureError(
                f"Expected one base class link in classinfo, found {len(links)}",
                element=identifier
            )
        return qualify(text_of(links[0]))

    def _class_doc(self, element: Tag) -> str:
        dox = find_sibling(element, lambda sibling: has_class(sibling, "classdox"), stop=_is_h3)
        return text_of(dox)

    def _fields(self, rows: list[Tag]) -> list[LuaField]:
        return [
            LuaField(
                name=text_of(child(child(row, 1), 0)),
                type=text_of(child(child(row, 0), 0)),
                doc=self._member_doc(row)
            )
            for row in scan(rows, _is_member_row, start=_is_data_members_row)
        ]

    def _functions(self, owner: LuaClass, rows: list[Tag]) -> list[LuaFunction]:
        functions = []
        seen = set()
        for row in rows:
            if _is_data_members_row(row):
                break
            if not _is_function_row(row):
                continue
            function = self._function(owner, row)
            if function.signature in seen:
                logger.debug(f"Skipping duplicate {function} in {owner.name}")
                continue
            seen.add(function.signature)
            functions.append(function)
        return functions

    def _function(self, owner: LuaClass, row: Tag) -> LuaFunction:
        def_cell = child(row, 0)
        name = text_of(child(child(row, 1), 0))
        constructor = _is_constructor(def_cell)
        full_name = qualified_function_name(owner, name, constructor)

        return LuaFunction(
            name=name,
            return_type=None if constructor else _type_token(child(def_cell, 0) or def_cell),
            arguments=self._params(full_name, row),
            doc=self._member_doc(row),
            return_doc=self._return_doc(full_name, row)
        )

    # --- Member documentation (the row after a member row) ---

    def _doc_blocks(self, row: Tag, selector: str) -> list[Tag]:
        doc_row = next_element_sibling(row)
        return doc_row.select(selector) if doc_row is not None else []

    def _member_doc(self, row: Tag) -> str:
        blocks = self._doc_blocks(row, ".doc > .dox")
        if not blocks:
            return ""
        if len(blocks) > 1:
            raise StructureError(f"Expected one doc block, found {len(blocks)}: {text_of(row)}")
        return " ".join(
            text_of(element) for element in element_children(blocks[0])
            if not _is_param_list(element) and not _is_result_discussion(element)
        )

    def _return_doc(self, full_name: str, row: Tag) -> str:
        parts = []
        discussions = self._doc_blocks(row, ".doc > .dox > .result-discussion")
        if len(discussions) > 1:
            raise StructureError(f"Several result discussions for {full_name}")
        if discussions:
            problem = _result_discussion_problem(discussions[0])
            if problem is not None:
                self._warn(f"Function return comment structure unknown ({problem}) in {full_name}")
            else:
                paragraph = child(discussions[0], 0)
                returns_word = text_of(child(paragraph, 0))
                parts.append(text_of(paragraph)[len(returns_word):].strip())

        info = self.overrides.return_doc(full_name)
        if info:
            parts.append(info.strip())
        return " ".join(part for part in parts if part)

    def _param_index(self, css_class: str, prefix: str, element: Tag) -> Optional[int]:
        try:
            return int(css_class[len(prefix):])
        except ValueError:
            self._warn(f"Failed to get param index: {css_class} (text: {text_of(element)})")
            return None

    def _params_info(self, row: Tag) -> dict[int, tuple[str, Optional[str]]]:
        """Parameter index → (name, description) from the member doc row."""
        info: dict[int, tuple[str, Optional[str]]] = {}
        for param_list in self._doc_blocks(row, ".doc > .dox > dl"):
            for element in element_children(param_list):
                for css_class in element.get("class") or []:
                    if css_class.startswith(PARAM_NAME_PREFIX):
                        index = self._param_index(css_class, PARAM_NAME_PREFIX, element)
                        if index is not None:
                            info[index] = (adjust_param_name(text_of(element)), None)
                    elif css_class.startswith(PARAM_DESCR_PREFIX):
                        index = self._param_index(css_class, PARAM_DESCR_PREFIX, element)
                        if index is None:
                            continue
                        if index not in info:
                            self._warn(f"Parameter description without a name: {css_class}")
                            continue
                        info[index] = (info[index][0], text_of(element))
        return info

    def _params(self, full_name: str, row: Tag) -> list[LuaField]:
        info = self._params_info(row)

        # In some rare cases several argument types share one span
        types = [
            token.strip()
            for element in child(row, 1).select(".functionargs > a, .functionargs > span")
            for token in _type_token(element).split(",")
            if token.strip()
        ]

        params = []
        for index, param_type in enumerate(types):
            name, doc = info.get(index, (None, None))
            override = self.overrides.param_doc(full_name, index)
            if override is not None:
                override_name, separator, override_doc = override.partition(":")
                if not separator:
                    override_name, override_doc = "", override
                if name is None and override_name.strip():
                    name = override_name.strip()
                doc = f"{doc} {override_doc.strip()}" if doc else override_doc.strip()
            params.append(LuaField(name=name, type=param_type, doc=doc or ""))
        return params

    # --- Enums ---

    def extract_enums(self, sections: list[Tag]) -> list[LuaEnum]:
        """Enums of the "Enum/Constants" section, in document order."""
        return [
            self._enum(heading)
            for heading in scan(sections, _is_enum_heading, start=_is_enum_section_title)
        ]

    def _enum(self, heading: Tag) -> LuaEnum:
        identifier = heading.get("id", "")
        listing = next_element_sibling(heading)
        if not (is_tag(listing, "ul") and has_class(listing, "enum")):
            raise StructureError("Expected <ul class=\"enum\"> after enum heading", element=identifier)

        values = []
        for item in element_children(listing):
            if not (is_tag(item, "li") and has_class(item, "const")):
                raise StructureError(
                    f"Unexpected <{item.name}> in enum list",
                    element=identifier
                )
            values.append(text_of(item))
        return LuaEnum(type=enum_type_from_id(identifier), values=values)


def extract(
    document: Union[BeautifulSoup, Tag, str],
    overrides: Optional[DocOverrides] = None
) -> ExtractionResult:
    """Convenience function to extract entities from the reference page."""
    return Extractor(overrides).extract(document)
