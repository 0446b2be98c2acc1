"""
Tests for the grade tree reconstruction.

The grades page only contains the top level rows: every folder row is expanded
with its own AJAX request. A fake fetcher answers those requests from canned
fragments, keyed by the row's data-rk.
"""

import unittest
from typing import Dict, List

from bs4 import BeautifulSoup

from ogeportal.errors import GradeParseError, MarkupError, PayloadDecodeError
from ogeportal.grades import (
    build_grade_tree,
    expand_form,
    get_grades,
    is_expandable,
    parse_fragment_rows,
)
from ogeportal.model import Aggregate, Assessment, Score, walk

from tests.portal_fixtures import (
    FakePortal,
    folder_row,
    grades_page,
    partial_response,
    subject_row,
)

QCM = "QCM [17.00 /20.0(1.0) 20.00 /20.0(1.0) 17.50 /20.0(1.0) ](1.0)"
TP = "TP [4.50 /5.0(1.0)  8.00 /10.0(1.0)   ](2.0)"


class FakeFetcher:
    def __init__(self, fragments: Dict[str, str]) -> None:
        self.fragments = fragments
        self.requested: List[str] = []

    def __call__(self, row_id: str) -> str:
        self.requested.append(row_id)
        return partial_response(self.fragments[row_id])


def _first_row(html: str):
    return BeautifulSoup(html, "html.parser").find("tr")


class TestRowClassifier(unittest.TestCase):
    def test_folder_row_is_expandable(self) -> None:
        self.assertTrue(is_expandable(_first_row(folder_row("0", "Semestre 1", "1.0"))))

    def test_styled_last_span_is_a_leaf(self) -> None:
        self.assertFalse(is_expandable(_first_row(subject_row("0_0", "Maths", "2.0"))))

    def test_empty_style_on_last_span_is_a_folder(self) -> None:
        row = _first_row(
            '<tr data-rk="0"><td><span class="ui-treetable-toggler" style=""></span>UE Sciences</td>'
            "<td>6.0</td><td></td></tr>"
        )
        self.assertTrue(is_expandable(row))

    def test_label_without_span_is_a_markup_error(self) -> None:
        row = _first_row('<tr data-rk="0"><td>Maths</td><td>1.0</td><td></td></tr>')
        with self.assertRaises(MarkupError):
            is_expandable(row)

    def test_expand_form_fields(self) -> None:
        self.assertEqual(
            expand_form("0_1"),
            {
                "javax.faces.partial.ajax": "true",
                "javax.faces.partial.render": "mainBilanForm:treeTable",
                "mainBilanForm:treeTable_expand": "0_1",
            },
        )

    def test_fragment_rows_keep_order(self) -> None:
        fragment = "\n".join(subject_row(f"0_{i}", f"S{i}", "1.0") for i in range(4))
        rows = parse_fragment_rows(fragment)
        self.assertEqual([r["data-rk"] for r in rows], ["0_0", "0_1", "0_2", "0_3"])


class TestBuildGradeTree(unittest.TestCase):
    def setUp(self) -> None:
        # Semestre 1 (already open in the page: its level-2 rows must not be read directly)
        #   UE Sciences
        #     Maths: QCM + TP
        #     Physique: no grades yet
        #   Anglais: one assessment
        # Semestre 2
        #   (no subjects yet)
        self.page = grades_page(
            folder_row("0", "Semestre 1", "1.0")
            + subject_row("0_9", "Ne pas lire", "1.0", QCM)
            + folder_row("1", "Semestre 2", "1.0")
        )
        self.fetcher = FakeFetcher(
            {
                "0": folder_row("0_0", "UE Sciences", "6.0", level=2)
                + subject_row("0_1", "Anglais", "2.0", "Oral [12.00 /20.0(1.0) ](1.0)"),
                "0_0": subject_row("0_0_0", "Maths", "3.0", f"\n {QCM}\n {TP}\n", level=3)
                + subject_row("0_0_1", "Physique", "3.0", "", level=3),
                "1": "",
            }
        )

    def test_root(self) -> None:
        root = build_grade_tree(self.page, self.fetcher)

        self.assertEqual(root.name, "Root")
        self.assertEqual(root.coefficient, 1.0)
        self.assertEqual([c.name for c in root.children], ["Semestre 1", "Semestre 2"])

    def test_expansion_is_depth_first_in_document_order(self) -> None:
        build_grade_tree(self.page, self.fetcher)
        self.assertEqual(self.fetcher.requested, ["0", "0_0", "1"])

    def test_full_structure(self) -> None:
        root = build_grade_tree(self.page, self.fetcher)

        s1 = root.find("Semestre 1")
        self.assertIsInstance(s1, Aggregate)
        self.assertEqual([c.name for c in s1.children], ["UE Sciences", "Anglais"])

        ue = s1.find("UE Sciences")
        self.assertEqual(ue.coefficient, 6.0)
        self.assertEqual([c.name for c in ue.children], ["Maths", "Physique"])

        maths = ue.find("Maths")
        self.assertEqual(maths.coefficient, 3.0)
        self.assertEqual([a.name for a in maths.children], ["QCM", "TP"])
        self.assertIsInstance(maths.children[0], Assessment)
        self.assertEqual(
            maths.children[0].children,
            (Score(17.0, 20.0, 1.0), Score(20.0, 20.0, 1.0), Score(17.5, 20.0, 1.0)),
        )
        self.assertEqual(maths.children[1].coefficient, 2.0)

        self.assertEqual(ue.find("Physique").children, ())
        self.assertEqual(root.find("Semestre 2").children, ())

    def test_rows_already_open_in_page_are_not_read_twice(self) -> None:
        root = build_grade_tree(self.page, self.fetcher)
        names = [getattr(e, "name", None) for e in walk(root)]
        self.assertNotIn("Ne pas lire", names)

    def test_empty_coefficient_drops_row_and_subtree(self) -> None:
        page = grades_page(
            folder_row("0", "Semestre 1", "1.0")
            + folder_row("1", "Stage", "")
            + folder_row("2", "Semestre 2", "1.0")
        )
        fetcher = FakeFetcher(
            {
                "0": subject_row("0_0", "Maths", "1.0", QCM)
                + subject_row("0_1", "Bonus", "   ", QCM),
                "1": subject_row("1_0", "Rapport", "1.0", QCM),
                "2": subject_row("2_0", "Réseaux", "1.0"),
            }
        )

        root = build_grade_tree(page, fetcher)

        self.assertEqual([c.name for c in root.children], ["Semestre 1", "Semestre 2"])
        self.assertEqual([c.name for c in root.find("Semestre 1").children], ["Maths"])
        self.assertNotIn("1", fetcher.requested)
        names = [getattr(e, "name", None) for e in walk(root)]
        self.assertNotIn("Rapport", names)
        self.assertNotIn("Bonus", names)

    def test_malformed_coefficient_aborts(self) -> None:
        page = grades_page(subject_row("0", "Maths", "1,5", QCM, level=1))
        with self.assertRaises(GradeParseError):
            build_grade_tree(page, FakeFetcher({}))

    def test_missing_row_id_aborts(self) -> None:
        page = grades_page(folder_row("0", "Semestre 1", "1.0").replace(' data-rk="0"', ""))
        with self.assertRaises(MarkupError):
            build_grade_tree(page, FakeFetcher({}))

    def test_missing_grades_cell_aborts(self) -> None:
        row = (
            '<tr data-rk="0" class="ui-node-level-1">'
            '<td><span style="visibility:hidden"></span>Maths</td><td>1.0</td></tr>'
        )
        with self.assertRaises(MarkupError):
            build_grade_tree(grades_page(row), FakeFetcher({}))

    def test_expansion_without_cdata_aborts(self) -> None:
        page = grades_page(folder_row("0", "Semestre 1", "1.0"))
        with self.assertRaises(PayloadDecodeError):
            build_grade_tree(page, lambda rid: "<partial-response/>")

    def test_page_without_rows_is_a_markup_error(self) -> None:
        with self.assertRaises(MarkupError):
            build_grade_tree("<html><body>Connexion</body></html>", FakeFetcher({}))


class TestGetGrades(unittest.TestCase):
    def test_expansions_are_posted_to_grades_page(self) -> None:
        portal = FakePortal(posts=lambda url, data: partial_response(subject_row("0_0", "Maths", "1.0", QCM)))
        portal.pages[portal.grades_url] = grades_page(folder_row("0", "Semestre 1", "1.0"))

        root = get_grades(portal)

        self.assertEqual(root.find("Semestre 1").find("Maths").children[0].name, "QCM")
        self.assertEqual(
            portal.calls,
            [
                ("GET", portal.grades_url, None),
                ("POST", portal.grades_url, expand_form("0")),
            ],
        )


if __name__ == "__main__":
    unittest.main()
