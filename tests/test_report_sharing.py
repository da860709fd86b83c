"""Tests for the PDF report, email draft parsing and SMTP sharing."""

from __future__ import annotations

import io
import unittest
from unittest import mock

from adk_extra_agents import (
    REPORT_FILENAME,
    build_report_pdf,
    fallback_email_draft,
    parse_email_draft,
    send_email_smtp,
)
from engine.schemas import CareerAnalysis, SwotText


def make_result(analysis: str) -> CareerAnalysis:
    return CareerAnalysis(
        swot=SwotText(
            strengths="Strong SQL skills\nClear writer",
            weaknesses="No people management",
            opportunities="Growing data teams",
            threats="Automation of reporting",
        ),
        analysis=analysis,
        source="resume",
    )


class PdfReportTests(unittest.TestCase):
    def test_pdf_contains_swot_and_sections(self) -> None:
        from pypdf import PdfReader

        pdf = build_report_pdf(make_result("## NEXT STEPS\n- Update **LinkedIn** profile"))
        self.assertTrue(pdf.startswith(b"%PDF"))

        text = "\n".join(page.extract_text() or "" for page in PdfReader(io.BytesIO(pdf)).pages)
        self.assertIn("Career Analysis Report", text)
        self.assertIn("Strong SQL skills", text)
        self.assertIn("NEXT STEPS", text)
        self.assertIn("Update LinkedIn profile", text)

    def test_long_reports_span_pages(self) -> None:
        from pypdf import PdfReader

        body = "\n".join(f"- Step {i}: " + "practice interviewing " * 12 for i in range(120))
        pdf = build_report_pdf(make_result("## ACTION PLAN\n" + body))
        self.assertGreater(len(PdfReader(io.BytesIO(pdf)).pages), 1)


class EmailDraftTests(unittest.TestCase):
    def test_parses_fenced_json(self) -> None:
        draft = parse_email_draft('```json\n{"subject": "My plan", "body": "Hi Sam, see attached."}\n```', "# report")
        self.assertEqual(draft.subject, "My plan")
        self.assertEqual(draft.body, "Hi Sam, see attached.")

    def test_falls_back_on_non_json(self) -> None:
        self.assertEqual(parse_email_draft("Sorry, I cannot help.", "# report"), fallback_email_draft("# report"))

    def test_falls_back_on_empty_body(self) -> None:
        draft = parse_email_draft('{"subject": "Only a subject"}', "# report")
        self.assertIn("# report", draft.body)


class SendEmailTests(unittest.TestCase):
    def test_sends_with_pdf_attachment(self) -> None:
        with mock.patch("smtplib.SMTP") as smtp_cls:
            result = send_email_smtp(
                smtp_host="smtp.example.com",
                smtp_port=587,
                smtp_user="me@example.com",
                smtp_password="pw",
                sender="me@example.com",
                recipient="friend@example.com",
                subject="My career report",
                body="See attached.",
                attachment=b"%PDF-1.4 fake",
            )

        self.assertEqual(result, {"ok": True})
        smtp_cls.assert_called_once_with("smtp.example.com", 587)
        server = smtp_cls.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("me@example.com", "pw")

        msg = server.send_message.call_args.args[0]
        self.assertEqual(msg["To"], "friend@example.com")
        attachments = list(msg.iter_attachments())
        self.assertEqual(len(attachments), 1)
        self.assertEqual(attachments[0].get_filename(), REPORT_FILENAME)

    def test_requires_host(self) -> None:
        with self.assertRaises(ValueError):
            send_email_smtp("", 587, "", "", "me@example.com", "friend@example.com", "s", "b")


if __name__ == "__main__":
    unittest.main()
