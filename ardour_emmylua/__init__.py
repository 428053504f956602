"""
Ardour EmmyLua scraper

Scrapes the Ardour manual's Lua class reference and writes EmmyLua
annotation stubs for Lua IDE tooling.
- Preprocessor: decodes and parses the reference page
- Extractor: classes, functions, fields and enums from the flat markup
- Resolver: namespace tree and enum ownership
- Emitter: annotation text

Public API surface:
  Pipeline classes : Preprocessor, Extractor, Resolver, Emitter, StubGenerator
  Data models      : LuaClass, LuaEnum, LuaField, LuaFunction, ClassKind,
                     ExtractionResult, Hierarchy
  Overrides        : DocOverrides
  Error types      : ScraperError, StructureError, FetchError, OverrideError
"""

# --- Pipeline stage classes ---
from .preprocessor import Preprocessor
from .extractor import Extractor
from .resolver import Resolver
from .emitter import Emitter
from .main import StubGenerator, generate_stubs, generate_stubs_file

# --- Data models ---
from .schemas import (
    ClassKind, ExtractionResult, Hierarchy, LuaClass, LuaEnum, LuaField, LuaFunction,
)
from .type_mapper import map_type

# --- Overrides ---
from .overrides import DocOverrides

# --- Exceptions ---
from .exceptions import ScraperError, StructureError, FetchError, OverrideError

__version__ = "0.1.0"
__all__ = [
    "Preprocessor",
    "Extractor",
    "Resolver",
    "Emitter",
    "StubGenerator",
    "generate_stubs",
    "generate_stubs_file",
    "ClassKind",
    "ExtractionResult",
    "Hierarchy",
    "LuaClass",
    "LuaEnum",
    "LuaField",
    "LuaFunction",
    "map_type",
    "DocOverrides",
    "ScraperError",
    "StructureError",
    "FetchError",
    "OverrideError",
]
