"""
User-supplied documentation overrides.

Two JSON files map names to extra documentation that is merged into (never
replaces) the scraped text:

  classdoc.json     class name → text, e.g. {"Session": "..."}
  functiondoc.json  fully qualified function name → text, plus the composite
                    keys "<function>:<index>" for parameters ("name:doc", the
                    name part is used only when the page has none) and
                    "<function>:return" for the return value.

Both are loaded once at start-up and handed to the Extractor and Emitter.
"""

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from .exceptions import OverrideError
from .logger import get_module_logger

logger = get_module_logger("overrides")

RESOURCES_DIR = Path(__file__).parent / "resources"
DEFAULT_CLASS_DOC_PATH = RESOURCES_DIR / "classdoc.json"
DEFAULT_FUNCTION_DOC_PATH = RESOURCES_DIR / "functiondoc.json"


class DocOverrides(BaseModel):
    """Read-only lookups of extra class and function documentation."""
    classes: dict[str, str] = Field(default_factory=dict)
    functions: dict[str, str] = Field(default_factory=dict)

    def class_doc(self, class_name: str) -> Optional[str]:
        return self.classes.get(class_name)

    def function_doc(self, full_function_name: str) -> Optional[str]:
        return self.functions.get(full_function_name)

    def param_doc(self, full_function_name: str, index: int) -> Optional[str]:
        return self.functions.get(f"{full_function_name}:{index}")

    def return_doc(self, full_function_name: str) -> Optional[str]:
        return self.functions.get(f"{full_function_name}:return")

    @classmethod
    def load(
        cls,
        class_doc_path: Optional[Union[str, Path]] = None,
        function_doc_path: Optional[Union[str, Path]] = None
    ) -> "DocOverrides":
        """
        Load both override files.

        Args:
            class_doc_path: Class doc JSON (default: bundled classdoc.json)
            function_doc_path: Function doc JSON (default: bundled functiondoc.json)

        Returns:
            DocOverrides with both lookups filled
        """
        classes = _read_lookup(Path(class_doc_path or DEFAULT_CLASS_DOC_PATH))
        functions = _read_lookup(Path(function_doc_path or DEFAULT_FUNCTION_DOC_PATH))
        logger.info(f"Loaded {len(classes)} class and {len(functions)} function doc overrides")
        return cls(classes=classes, functions=functions)


def _read_lookup(path: Path) -> dict[str, str]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise OverrideError(f"Cannot read override file: {e}", path=str(path))
    except json.JSONDecodeError as e:
        raise OverrideError(f"Invalid JSON in override file: {e}", path=str(path))

    if not isinstance(data, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in data.items()
    ):
        raise OverrideError(
            "Override file must be a JSON object of strings",
            path=str(path)
        )
    logger.debug(f"Read {len(data)} overrides from {path}")
    return data
