"""
Main orchestrator for the Ardour EmmyLua scraper.

Coordinates the four-stage pipeline:
Preprocessor → Extractor → Resolver → Emitter, and wraps the result in the
license preamble and provenance comment of the output file.
"""

import os
import stat
import tempfile
from pathlib import Path
from typing import Optional, Union

from .preprocessor import Preprocessor
from .extractor import Extractor
from .resolver import Resolver
from .emitter import Emitter
from .fetcher import DEFAULT_REFERENCE_URL, DEFAULT_TIMEOUT, fetch_reference
from .overrides import RESOURCES_DIR, DocOverrides
from .logger import get_module_logger, setup_logger

logger = get_module_logger("main")

LICENSE_PATH = RESOURCES_DIR / "LICENSE"


class StubGenerator:
    """
    Main orchestrator for annotation generation.

    1. Preprocessor: decodes and parses the page
    2. Extractor: flat classes and enums
    3. Resolver: namespace tree
    4. Emitter: annotation text
    """

    def __init__(
        self,
        overrides: Optional[DocOverrides] = None,
        log_level: Optional[int] = None
    ):
        if log_level is not None:
            setup_logger(level=log_level)

        # Loaded once here and passed down explicitly
        self.overrides = overrides if overrides is not None else DocOverrides.load()

        self.preprocessor = Preprocessor()
        self.extractor = Extractor(self.overrides)
        self.resolver = Resolver()
        self.emitter = Emitter(self.overrides)

    def annotate(self, html: str) -> str:
        """
        Turn the reference page into annotation text (without preamble).

        Raises:
            StructureError: the page does not match the expected markup
        """
        logger.info("Starting pipeline")
        preprocessed = self.preprocessor.process(html)
        for warning in preprocessed["warnings"]:
            logger.debug(f"Preprocessing: {warning}")

        extraction = self.extractor.extract(preprocessed["soup"])
        hierarchy = self.resolver.resolve(extraction)
        annotations = self.emitter.emit(hierarchy)

        if extraction.warnings:
            logger.warning(f"Extraction finished with {len(extraction.warnings)} warnings")
        logger.info(f"Complete: {len(annotations)} characters of annotations")
        return annotations

    def annotate_bytes(self, raw_bytes: bytes) -> str:
        html, charset = Preprocessor.decode(raw_bytes)
        logger.debug(f"Decoded {len(raw_bytes)} bytes as {charset}")
        return self.annotate(html)

    def annotate_file(self, file_path: Union[str, Path]) -> str:
        """Annotate a saved copy of the reference page."""
        return self.annotate_bytes(Path(file_path).read_bytes())

    def annotate_url(
        self,
        url: str = DEFAULT_REFERENCE_URL,
        timeout: float = DEFAULT_TIMEOUT
    ) -> str:
        """Fetch and annotate the reference page."""
        return self.annotate_bytes(fetch_reference(url, timeout=timeout))

    @staticmethod
    def render_document(annotations: str, source_url: str = DEFAULT_REFERENCE_URL) -> str:
        """Prefix annotations with the license block and provenance comment."""
        license_text = LICENSE_PATH.read_text(encoding="utf-8")
        return (
            "--[[\n\n" + license_text + "\n--]]\n\n"
            "-- This is an AUTOMATICALLY generated file by web-scraping\n"
            f"-- {source_url}\n\n"
            + annotations
        )

    @staticmethod
    def write_output(output_path: Union[str, Path], text: str) -> Path:
        """
        Write the output file as UTF-8.

        The text goes to a temporary file next to the target which then
        replaces it, so a failed write never leaves a partial file behind.
        An existing target keeps its permissions; a new one gets the
        umask-default mode.
        """
        output_path = Path(output_path)
        mode = _output_mode(output_path)
        descriptor, temp_name = tempfile.mkstemp(
            prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent
        )
        try:
            with os.fdopen(descriptor, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(text)
            # mkstemp creates the file as 0600
            os.chmod(temp_name, mode)
            os.replace(temp_name, output_path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        logger.info(f"Wrote {output_path}")
        return output_path


def _output_mode(output_path: Path) -> int:
    try:
        return stat.S_IMODE(output_path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def generate_stubs(html: str, overrides: Optional[DocOverrides] = None) -> str:
    """Convenience function: annotation text for an HTML string."""
    return StubGenerator(overrides=overrides).annotate(html)


def generate_stubs_file(file_path: Union[str, Path], overrides: Optional[DocOverrides] = None) -> str:
    """Convenience function: annotation text for a saved page."""
    return StubGenerator(overrides=overrides).annotate_file(file_path)
