"""Tests for report sectioning and text exports."""

from __future__ import annotations

import unittest
from datetime import datetime

from engine.report import plain_line, section_theme, split_sections, swot_to_md, swot_to_txt
from engine.schemas import CareerAnalysis, SwotText

ANALYSIS = (
    "Thanks for sharing your profile.\n"
    "## CAREER PATH RECOMMENDATIONS\n"
    "1. Data engineer\n"
    "2. Analytics lead\n"
    "## THREAT MITIGATION\n"
    "- Keep learning **cloud** tooling\n"
    "[Review this plan every quarter]"
)


def make_result() -> CareerAnalysis:
    return CareerAnalysis(
        swot=SwotText(
            strengths="Strong SQL skills",
            weaknesses="No people management",
            opportunities="Growing data teams",
            threats="Automation of reporting",
        ),
        analysis=ANALYSIS,
        generated_at=datetime(2026, 3, 1, 9, 30),
    )


class SectionTests(unittest.TestCase):
    def test_split_on_markers_with_overview(self) -> None:
        sections = split_sections(ANALYSIS)
        self.assertEqual([s.title for s in sections], ["Overview", "CAREER PATH RECOMMENDATIONS", "THREAT MITIGATION"])
        self.assertEqual(sections[1].body, "1. Data engineer\n2. Analytics lead")
        self.assertEqual(sections[1].theme, "career")
        self.assertEqual(sections[2].theme, "threat")

    def test_blank_report_has_no_sections(self) -> None:
        self.assertEqual(split_sections(""), [])
        self.assertEqual(split_sections("##\n##  "), [])

    def test_theme_later_rules_win(self) -> None:
        self.assertEqual(section_theme("SKILLS DEVELOPMENT PLAN"), "action")
        self.assertEqual(section_theme("ACTION PLAN"), "action")
        self.assertEqual(section_theme("LEVERAGING STRENGTHS"), "strength")
        self.assertEqual(section_theme("INDUSTRY INSIGHTS"), "industry")
        self.assertEqual(section_theme("NEXT STEPS"), "next")
        self.assertEqual(section_theme("Closing thoughts"), "general")

    def test_plain_line(self) -> None:
        self.assertEqual(plain_line("**Bold** point"), "Bold point")
        self.assertEqual(plain_line("* item *one*"), "- item one")
        self.assertEqual(plain_line("[note to self]"), "note to self")


class ExportTests(unittest.TestCase):
    def test_markdown_export(self) -> None:
        md = swot_to_md(make_result())
        self.assertTrue(md.startswith("# Career Analysis Report"))
        self.assertIn("_Generated on 2026-03-01_", md)
        self.assertIn("### Strengths\nStrong SQL skills", md)
        self.assertIn("### CAREER PATH RECOMMENDATIONS", md)
        self.assertTrue(md.endswith("\n"))

    def test_text_export(self) -> None:
        txt = swot_to_txt(make_result())
        self.assertIn("SWOT ANALYSIS SUMMARY", txt)
        self.assertIn("Threats\nAutomation of reporting", txt)
        self.assertIn("THREAT MITIGATION\n- Keep learning cloud tooling\nReview this plan every quarter", txt)
        self.assertNotIn("**", txt)


if __name__ == "__main__":
    unittest.main()
