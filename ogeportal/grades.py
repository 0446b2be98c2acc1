"""
Grade tree extraction.

The grades page is a lazily rendered tree table: only the top level rows are in
the initial HTML, and the children of a folder row are fetched with one AJAX
"expand" request per folder. The tree is rebuilt depth-first, in document order,
one request at a time.

Row layout (cells of one <tr>):
    td[0]  label: the name as direct text, then one or more <span>; the last span
           has a style attribute on leaf rows only
    td[1]  coefficient ("1.0"); empty when the portal has no usable coefficient
    td[2]  grade lines of a subject (see ogeportal.parse)
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup, Comment
from bs4.element import Tag

from ogeportal.errors import MarkupError
from ogeportal.logger import get_logger
from ogeportal.model import ROOT_NAME, Aggregate, GradeEntry
from ogeportal.parse import extract_cdata, parse_coefficient, parse_grades_text
from ogeportal.scrape import Portal

log = get_logger(__name__)

TREE_TABLE_ID = "mainBilanForm:treeTable"
TOP_LEVEL_ROWS = "tbody > tr.ui-node-level-1"

# row_id -> raw body of the partial-update response
FetchChildren = Callable[[str], str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _cells(row: Tag) -> List[Tag]:
    return row.find_all("td", recursive=False)


def _cell(row: Tag, index: int, what: str) -> Tag:
    cells = _cells(row)
    if len(cells) <= index:
        raise MarkupError(f"Row {row.get('data-rk', '?')!r} has no {what} cell")
    return cells[index]


def _direct_text(node: Tag) -> str:
    parts = [s for s in node.find_all(string=True, recursive=False) if not isinstance(s, Comment)]
    return "".join(parts).strip()


def expand_form(row_id: str) -> Dict[str, str]:
    """
    Form fields of the AJAX request that renders the children of `row_id`.
    """
    return {
        "javax.faces.partial.ajax": "true",
        "javax.faces.partial.render": TREE_TABLE_ID,
        f"{TREE_TABLE_ID}_expand": row_id,
    }


def parse_fragment_rows(html: str) -> List[Tag]:
    """
    Return the sibling <tr> rows of an expansion fragment, in document order.
    """
    soup = BeautifulSoup(html, "html.parser")
    return soup.find_all("tr", recursive=False)


# ---------------------------------------------------------------------------
# Row classification
# ---------------------------------------------------------------------------


def is_expandable(row: Tag) -> bool:
    """
    A row is a folder when the last span of its label has no style attribute.
    """
    label = _cell(row, 0, "label")
    spans = label.find_all("span", recursive=False)
    if not spans:
        raise MarkupError(f"Row {row.get('data-rk', '?')!r} has no span in its label cell")
    return not spans[-1].get("style")


def row_id(row: Tag) -> str:
    """
    Opaque identifier the portal needs to expand a row (data-rk attribute).
    """
    value = row.get("data-rk")
    if not value:
        raise MarkupError("Expandable row has no data-rk attribute")
    return value


# ---------------------------------------------------------------------------
# Tree materialization (CORE LOGIC)
# ---------------------------------------------------------------------------


def materialize(row: Tag, fetch_children: FetchChildren) -> Optional[GradeEntry]:
    """
    Build the GradeEntry of one row and, recursively, of everything below it.

    Returns None when the row has an empty coefficient: such rows are dropped
    together with their whole subtree.
    """
    coefficient_text = _cell(row, 1, "coefficient").get_text().strip()
    if not coefficient_text:
        log.debug("Skipping row %r: empty coefficient", row.get("data-rk"))
        return None

    name = _direct_text(_cell(row, 0, "label"))
    coefficient = parse_coefficient(coefficient_text)

    if is_expandable(row):
        rid = row_id(row)
        log.debug("Expanding row %s (%s)", rid, name)
        fragment = extract_cdata(fetch_children(rid))

        children = []
        for child_row in parse_fragment_rows(fragment):
            child = materialize(child_row, fetch_children)
            if child is not None:
                children.append(child)
        return Aggregate(name=name, coefficient=coefficient, children=tuple(children))

    grades_text = _cell(row, 2, "grades").get_text()
    return Aggregate(name=name, coefficient=coefficient, children=parse_grades_text(grades_text))


def build_grade_tree(html: str, fetch_children: FetchChildren) -> Aggregate:
    """
    Build the complete grade tree from the initial grades page.
    """
    soup = BeautifulSoup(html, "html.parser")
    top_rows = soup.select(TOP_LEVEL_ROWS)
    if not top_rows:
        raise MarkupError("Grades page has no top level rows (expired session?)")

    children = []
    for row in top_rows:
        entry = materialize(row, fetch_children)
        if entry is not None:
            children.append(entry)

    log.info("Grade tree built: %d top level entries", len(children))
    return Aggregate(name=ROOT_NAME, coefficient=1.0, children=tuple(children))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_grades(portal: Portal) -> Aggregate:
    """
    Download the grades page and return the whole grade tree.
    """
    html = portal.navigate(portal.grades_url)

    def fetch_children(rid: str) -> str:
        return portal.post_form(portal.grades_url, expand_form(rid))

    return build_grade_tree(html, fetch_children)
