"""
Preprocessor: raw page bytes/text → parsed BeautifulSoup document.

- Detects the declared charset from raw bytes and decodes accordingly
- Sanitizes the string (NULL bytes, control characters, line endings)
- Parses with html5lib, falling back to lxml and html.parser
- Drops comments and script/style content so text extraction only sees
  rendered text

Pipeline position: Stage 1 of 4 (Preprocessor → Extractor → Resolver → Emitter).
Input:  raw HTML bytes or string
Output: dict with soup, warnings
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Comment

from .logger import get_module_logger

logger = get_module_logger("preprocessor")


class Preprocessor:
    """Rule-based HTML preparation for the extractor."""

    CONTENT_STRIP_ELEMENTS = ['script', 'style', 'noscript']

    # WHATWG encoding spec: browsers silently remap these charsets.
    # https://encoding.spec.whatwg.org/#names-and-labels
    WHATWG_CHARSET_MAP = {
        'iso-8859-1': 'windows-1252',
        'iso8859-1': 'windows-1252',
        'iso88591': 'windows-1252',
        'latin-1': 'windows-1252',
        'latin1': 'windows-1252',
        'us-ascii': 'windows-1252',
        'ascii': 'windows-1252',
        'iso-8859-9': 'windows-1254',
        'iso-8859-11': 'windows-874',
    }

    @staticmethod
    def detect_charset_from_bytes(raw_bytes: bytes) -> str:
        """
        Detect charset from raw HTML bytes by scanning the first 2048 bytes
        for <meta charset=...> or <meta http-equiv="Content-Type" content="...; charset=...">.

        Returns the browser-equivalent charset or 'utf-8' as default.
        """
        # The HTML spec requires the declaration within the first 1024 bytes
        head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

        charset = None

        m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
        if m:
            charset = m.group(1).strip().lower()

        if not charset:
            m = re.search(
                r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
                head_str, re.IGNORECASE
            )
            if m:
                charset = m.group(1).strip().lower()

        if not charset:
            return 'utf-8'

        return Preprocessor.WHATWG_CHARSET_MAP.get(charset, charset)

    @staticmethod
    def decode(raw_bytes: bytes, declared_charset: Optional[str] = None) -> tuple[str, str]:
        """
        Decode page bytes with the declared (or sniffed) charset.

        Returns:
            Tuple of (html, charset used)
        """
        charset = declared_charset or Preprocessor.detect_charset_from_bytes(raw_bytes)
        try:
            return raw_bytes.decode(charset, errors='replace'), charset
        except LookupError:
            logger.warning(f"Unknown charset {charset!r}, decoding as utf-8")
            return raw_bytes.decode('utf-8', errors='replace'), 'utf-8'

    def _sanitize_html(self, html: str) -> tuple[str, list[str]]:
        """
        Sanitize the raw HTML string before parsing.

        Returns:
            Tuple of (sanitized HTML, list of warnings)
        """
        warnings = []
        sanitized = html

        # NULL bytes are never valid in HTML text content
        if '\x00' in sanitized:
            sanitized = sanitized.replace('\x00', '')
            warnings.append("Removed NULL bytes")

        sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n')

        # Control characters other than tab/newline would end up in doc text
        control_chars = ''.join(
            chr(c) for c in range(32) if c not in (9, 10, 13)
        )
        if any(c in sanitized for c in control_chars):
            sanitized = sanitized.translate(str.maketrans('', '', control_chars))
            warnings.append("Removed control characters")

        logger.debug(f"Sanitization complete. {len(warnings)} fixes applied.")
        return sanitized, warnings

    def _parse(self, html: str, warnings: list[str]) -> BeautifulSoup:
        """Parser fallback chain: html5lib → lxml → html.parser."""
        try:
            return BeautifulSoup(html, 'html5lib')
        except Exception as e:
            logger.warning(f"html5lib parsing failed, trying lxml: {e}")
            warnings.append(f"html5lib parsing failed: {e}")

        try:
            return BeautifulSoup(html, 'lxml')
        except Exception as e:
            logger.warning(f"lxml parsing also failed: {e}")
            warnings.append(f"lxml parsing failed: {e}")
        return BeautifulSoup(html, 'html.parser')

    def process(self, html: str) -> dict:
        """
        Process raw HTML into a parsed document.

        Args:
            html: Raw HTML string

        Returns:
            dict with:
                - soup: Parsed BeautifulSoup document
                - warnings: List of warnings encountered
        """
        sanitized_html, warnings = self._sanitize_html(html)
        soup = self._parse(sanitized_html, warnings)

        removed = self._remove_comments(soup)
        if removed:
            logger.debug(f"Removed {removed} comments")

        stripped = self._strip_content_elements(soup)
        if stripped:
            warnings.append(f"Removed content from {stripped} script/style elements")

        return {
            "soup": soup,
            "warnings": warnings,
        }

    def process_bytes(self, raw_bytes: bytes) -> dict:
        """Decode with the sniffed charset, then process."""
        html, _ = self.decode(raw_bytes)
        return self.process(html)

    def _remove_comments(self, soup: BeautifulSoup) -> int:
        """Remove HTML comments. Returns count of removed comments."""
        comments = soup.find_all(string=lambda text: isinstance(text, Comment))
        for comment in comments:
            comment.extract()
        return len(comments)

    def _strip_content_elements(self, soup: BeautifulSoup) -> int:
        count = 0
        for element in soup.find_all(self.CONTENT_STRIP_ELEMENTS):
            element.decompose()
            count += 1
        return count
