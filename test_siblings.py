#!/usr/bin/env python3
"""
Tests for the bounded sibling scans the extractor is built on.
"""

import pytest
from bs4 import BeautifulSoup

from ardour_emmylua.siblings import (
    child, element_children, find_sibling, find_siblings, following_siblings,
    has_class, is_tag, next_element_sibling, scan, text_of,
)

FLAT_HTML = """
<div id="root">
  <p class="a" id="p1">one</p>
  <h4 id="start">start</h4>
  <p class="a" id="p2">two</p>
  <p class="b" id="p3">three</p>
  <h3 id="stop">stop</h3>
  <p class="a" id="p4">four</p>
</div>
"""


@pytest.fixture
def soup():
    return BeautifulSoup(FLAT_HTML, 'html5lib')


def _ids(elements):
    return [element["id"] for element in elements]


def _is_a(element):
    return has_class(element, "a")


def test_unbounded_scan_visits_all_following_siblings(soup):
    first = soup.select_one("#p1")
    assert _ids(find_siblings(first, _is_a)) == ["p2", "p4"]


def test_stop_ends_the_scan_for_good(soup):
    """p4 matches find but lies after the stop marker."""
    first = soup.select_one("#p1")
    assert _ids(find_siblings(first, _is_a, stop=lambda el: is_tag(el, "h3"))) == ["p2"]


def test_start_element_itself_is_tested_against_find(soup):
    first = soup.select_one("#p1")
    found = find_siblings(first, lambda el: is_tag(el, "h4"), start=lambda el: is_tag(el, "h4"))
    assert _ids(found) == ["start"]


def test_stop_is_ignored_before_start(soup):
    """
    The h4 stop marker comes before the start marker p.b, so it must not
    end the scan; only p4 follows the start.
    """
    first = soup.select_one("#p1")
    found = find_siblings(
        first,
        _is_a,
        start=lambda el: has_class(el, "b"),
        stop=lambda el: is_tag(el, "h4")
    )
    assert _ids(found) == ["p4"]


def test_start_that_never_matches_yields_nothing(soup):
    first = soup.select_one("#p1")
    assert list(find_siblings(first, _is_a, start=lambda el: is_tag(el, "table"))) == []


def test_sibling_scan_is_restartable(soup):
    found = find_siblings(soup.select_one("#p1"), _is_a)
    assert _ids(found) == _ids(found) == ["p2", "p4"]


def test_find_sibling_returns_first_match_or_none(soup):
    first = soup.select_one("#p1")
    assert find_sibling(first, lambda el: has_class(el, "b"))["id"] == "p3"
    assert find_sibling(first, lambda el: is_tag(el, "ul")) is None


def test_detached_element_has_no_siblings(soup):
    orphan = soup.new_tag("p")
    assert list(following_siblings(orphan)) == []
    assert find_sibling(orphan, lambda el: True) is None


def test_following_siblings_are_walked_lazily(soup):
    """
    Siblings are read one at a time from the tree, so a scan that stops at
    the next heading never touches the rest of a large page.
    """
    siblings = following_siblings(soup.select_one("#p1"))
    assert next(siblings)["id"] == "start"

    soup.select_one("#p4").decompose()
    assert _ids(siblings) == ["p2", "p3", "stop"]


def test_scan_over_plain_list():
    items = BeautifulSoup("<i>1</i><b>2</b><i>3</i><u>4</u><i>5</i>", 'html.parser')
    elements = element_children(items)
    found = scan(elements, lambda el: is_tag(el, "i"), start=lambda el: is_tag(el, "b"),
                 stop=lambda el: is_tag(el, "u"))
    assert [text_of(el) for el in found] == ["3"]


def test_child_and_next_sibling_skip_text_nodes(soup):
    root = soup.select_one("#root")
    assert child(root, 0)["id"] == "p1"
    assert child(root, 5)["id"] == "p4"
    assert child(root, 6) is None
    assert child(None, 0) is None
    assert next_element_sibling(soup.select_one("#p3"))["id"] == "stop"
    assert next_element_sibling(soup.select_one("#p4")) is None


def test_text_of_collapses_whitespace():
    element = BeautifulSoup("<p>  Get\n  all   <b>routes</b>\t</p>", 'html.parser').p
    assert text_of(element) == "Get all routes"
    assert text_of(None) == ""


def test_has_class_and_is_tag_accept_none():
    assert not has_class(None, "a")
    assert not is_tag(None, "p")
