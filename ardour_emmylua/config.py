"""
Run configuration.

Values come from ARDOUR_LUA_* environment variables (a .env file is loaded
by the command-line entry point) and can be overridden by CLI flags.

  ARDOUR_LUA_REFERENCE_URL   page to scrape
  ARDOUR_LUA_CLASS_DOC       class doc override JSON
  ARDOUR_LUA_FUNCTION_DOC    function doc override JSON
  ARDOUR_LUA_TIMEOUT         fetch timeout in seconds
  ARDOUR_LUA_LOG_LEVEL       logging level name (INFO, DEBUG, ...)
"""

import logging
import os
from typing import Optional

from pydantic import BaseModel, field_validator

from .fetcher import DEFAULT_REFERENCE_URL, DEFAULT_TIMEOUT


class ScraperConfig(BaseModel):
    reference_url: str = DEFAULT_REFERENCE_URL
    class_doc_path: Optional[str] = None      # None: bundled classdoc.json
    function_doc_path: Optional[str] = None   # None: bundled functiondoc.json
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls, **overrides) -> "ScraperConfig":
        """Build from the environment; keyword arguments that are not None win."""
        values = {
            "reference_url": os.getenv("ARDOUR_LUA_REFERENCE_URL"),
            "class_doc_path": os.getenv("ARDOUR_LUA_CLASS_DOC"),
            "function_doc_path": os.getenv("ARDOUR_LUA_FUNCTION_DOC"),
            "timeout": os.getenv("ARDOUR_LUA_TIMEOUT"),
            "log_level": os.getenv("ARDOUR_LUA_LOG_LEVEL"),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**{key: value for key, value in values.items() if value is not None})
