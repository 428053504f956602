"""
Bounded sibling scans over BeautifulSoup elements.

The class reference expresses structure through document order only: a class
heading (<h3>) is followed by its info paragraph, doc block and members
table as *siblings*, and the next <h3> starts the next class. These helpers
scan the siblings between such heading markers instead of descending the
tree; a scan reads only as far as its stop marker.
"""

import re
from typing import Callable, Iterable, Iterator, Optional

from bs4 import Tag

Predicate = Callable[[Tag], bool]

WHITESPACE_PATTERN = re.compile(r'\s+')


def element_children(element: Tag) -> list[Tag]:
    """Element children only (text nodes and comments skipped)."""
    return [node for node in element.children if isinstance(node, Tag)]


def child(element: Optional[Tag], index: int) -> Optional[Tag]:
    """The index-th element child, or None."""
    if element is None:
        return None
    children = element_children(element)
    return children[index] if 0 <= index < len(children) else None


def following_siblings(element: Tag) -> Iterator[Tag]:
    """Element siblings after element, in document order, walked lazily."""
    return (node for node in element.next_siblings if isinstance(node, Tag))


def next_element_sibling(element: Tag) -> Optional[Tag]:
    return element.find_next_sibling()


def scan(
    elements: Iterable[Tag],
    find: Predicate,
    start: Optional[Predicate] = None,
    stop: Optional[Predicate] = None
) -> Iterator[Tag]:
    """
    Yield elements matching find, bounded by start and stop.

    Elements are skipped until start first matches; that element and every
    later one is tested against stop first (the scan ends for good on the
    first hit) and yielded when it satisfies find.
    """
    started = start is None
    for element in elements:
        if not started:
            if not start(element):
                continue
            started = True
        if stop is not None and stop(element):
            return
        if find(element):
            yield element


class SiblingScan:
    """
    Lazy, restartable view of the siblings following one element.

    Each iteration re-runs the scan from the element, so the same SiblingScan
    can be consumed any number of times.
    """

    def __init__(
        self,
        element: Tag,
        find: Predicate,
        start: Optional[Predicate] = None,
        stop: Optional[Predicate] = None
    ):
        self.element = element
        self.find = find
        self.start = start
        self.stop = stop

    def __iter__(self) -> Iterator[Tag]:
        return scan(following_siblings(self.element), self.find, self.start, self.stop)

    def first(self) -> Optional[Tag]:
        return next(iter(self), None)


def find_siblings(
    element: Tag,
    find: Predicate,
    start: Optional[Predicate] = None,
    stop: Optional[Predicate] = None
) -> SiblingScan:
    return SiblingScan(element, find, start, stop)


def find_sibling(
    element: Tag,
    find: Predicate,
    start: Optional[Predicate] = None,
    stop: Optional[Predicate] = None
) -> Optional[Tag]:
    return SiblingScan(element, find, start, stop).first()


# --- Predicates and text helpers ---

def has_class(element: Optional[Tag], css_class: str) -> bool:
    if element is None:
        return False
    return css_class in (element.get("class") or [])


def is_tag(element: Optional[Tag], name: str) -> bool:
    return element is not None and element.name == name


def text_of(element: Optional[Tag]) -> str:
    """Element text with whitespace runs collapsed and ends trimmed."""
    if element is None:
        return ""
    return WHITESPACE_PATTERN.sub(' ', element.get_text()).strip()
