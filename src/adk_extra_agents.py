"""Report export and sharing.

1) PDF report
   - build_report_pdf: renders the SWOT summary and every analysis section
     of a CareerAnalysis with reportlab and returns the PDF bytes.

2) EmailAgent
   - Purpose: draft an email subject/body for sharing the career report.
   - Deterministic sender: send_email_smtp (no LLM involved), which can
     attach the PDF.

Agents are created and run per request (no cross-request memory).
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from email.message import EmailMessage
from io import BytesIO
from typing import Optional

from engine.report import SWOT_TITLES, body_lines, split_sections
from engine.schemas import CareerAnalysis
from engine.settings import DEFAULT_MODEL
from engine.utils import extract_first_json_object, safe_json_loads
from llm_gemini import _run_sync

logger = logging.getLogger(__name__)

REPORT_FILENAME = "career-analysis.pdf"


# -----------------
# PDF report
# -----------------


def build_report_pdf(result: CareerAnalysis) -> bytes:
    """Render a career analysis as a simple multi-page PDF.

    Plain text only: markdown emphasis is removed and long lines are wrapped
    to the page width.
    """

    try:
        from reportlab.lib.pagesizes import A4
        from reportlab.lib.utils import simpleSplit
        from reportlab.pdfgen import canvas
    except Exception as e:  # noqa: BLE001
        raise RuntimeError(
            "Missing dependency: reportlab. Install it in your environment."
        ) from e

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle("Career Analysis Report")
    width, height = A4
    margin = 40
    usable = width - 2 * margin
    y = height - 50

    def write(text: str, font: str = "Helvetica", size: int = 10, gap: int = 0) -> None:
        nonlocal y
        line_height = size + 3
        for line in simpleSplit(text, font, size, usable) or [""]:
            if y < 50:
                c.showPage()
                y = height - 50
            c.setFont(font, size)
            c.drawString(margin, y, line)
            y -= line_height
        y -= gap

    write("Career Analysis Report", "Helvetica-Bold", 18, gap=4)
    write(f"Generated on {result.generated_at:%Y-%m-%d}", "Helvetica-Oblique", 9, gap=14)

    write("SWOT Analysis Summary", "Helvetica-Bold", 14, gap=6)
    for field, title in SWOT_TITLES.items():
        write(title, "Helvetica-Bold", 11, gap=2)
        for line in getattr(result.swot, field).splitlines():
            write(line)
        y -= 8

    y -= 8
    write("AI-Powered Career Insights", "Helvetica-Bold", 14, gap=6)
    for section in split_sections(result.analysis):
        write(section.title, "Helvetica-Bold", 12, gap=2)
        for line in body_lines(section.body):
            write(line)
        y -= 10

    c.showPage()
    c.save()

    pdf_bytes = buf.getvalue()
    logger.info("Built report PDF (%d bytes)", len(pdf_bytes))
    return pdf_bytes


def send_email_smtp(
    smtp_host: str,
    smtp_port: int,
    smtp_user: str,
    smtp_password: str,
    sender: str,
    recipient: str,
    subject: str,
    body: str,
    attachment: Optional[bytes] = None,
    attachment_name: str = REPORT_FILENAME,
) -> dict:
    """Send an email via SMTP, optionally with the PDF report attached.

    This is deterministic and does not use the LLM.
    Requires valid SMTP credentials.
    """

    import smtplib

    if not smtp_host:
        raise ValueError("SMTP host is required.")

    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.set_content(body)
    if attachment:
        msg.add_attachment(attachment, maintype="application", subtype="pdf", filename=attachment_name)

    with smtplib.SMTP(smtp_host, int(smtp_port)) as s:
        s.starttls()
        if smtp_user:
            s.login(smtp_user, smtp_password)
        s.send_message(msg)

    logger.info("Report emailed to %s", recipient)
    return {"ok": True}


@dataclass
class EmailDraft:
    subject: str
    body: str


def fallback_email_draft(report_markdown: str) -> EmailDraft:
    return EmailDraft(
        subject="My Career Analysis Report",
        body="My personalized career analysis:\n\n" + report_markdown,
    )


# -----------------
# ADK agent runners
# -----------------


async def _run_agent_once(*, api_key: Optional[str], agent, prompt: str) -> str:
    """Run an ADK agent once and return final text."""

    from google.adk.runners import Runner
    from google.adk.sessions import InMemorySessionService
    from google.genai import types

    if api_key and api_key.strip():
        os.environ["GOOGLE_API_KEY"] = api_key.strip()

    session_service = InMemorySessionService()
    app_name = "career_compass"
    user_id = "streamlit_user"
    session_id = f"util_{uuid.uuid4().hex}"
    session = await session_service.create_session(app_name=app_name, user_id=user_id, session_id=session_id)

    runner = Runner(agent=agent, app_name=app_name, session_service=session_service)
    content = types.Content(role="user", parts=[types.Part(text=prompt)])

    events = runner.run_async(user_id=user_id, session_id=session.id, new_message=content)
    final_text = ""
    async for event in events:
        if event.is_final_response() and event.content and event.content.parts:
            final_text = "".join([p.text or "" for p in event.content.parts])
            break
    return (final_text or "").strip()


def parse_email_draft(text: str, report_markdown: str) -> EmailDraft:
    """Read the agent's JSON answer; anything unusable yields the fixed draft."""
    try:
        obj = safe_json_loads(extract_first_json_object(text))
    except ValueError:
        logger.warning("Email agent did not return JSON; using fallback draft.")
        return fallback_email_draft(report_markdown)

    subject = str(obj.get("subject") or "").strip() or "My Career Analysis Report"
    body = str(obj.get("body") or "").strip()
    if not body:
        return fallback_email_draft(report_markdown)
    return EmailDraft(subject=subject, body=body)


def email_agent_draft_email(
    *,
    api_key: Optional[str],
    report_markdown: str,
    recipient_name: str = "",
    model: str = DEFAULT_MODEL,
) -> EmailDraft:
    """ADK EmailAgent: drafts an email subject + body for sharing the report."""

    try:
        from google.adk.agents.llm_agent import Agent
    except Exception as e:  # noqa: BLE001
        raise RuntimeError("Missing dependency: google-adk. Install it.") from e

    agent = Agent(
        model=model,
        name="email_agent",
        description="Drafts short emails that share a career analysis report.",
        instruction=(
            "Draft a friendly, professional email in English sharing a personal career analysis. "
            "Return STRICT JSON ONLY with keys: subject, body. "
            "Body should be plain text, no markdown. "
            "Keep it concise: a short summary of the SWOT and the top three next steps. "
            "Mention that the full report is attached as a PDF."
        ),
    )

    prompt = (
        f"Recipient name (optional): {recipient_name}\n"
        "You are emailing the career analysis below.\n\n"
        f"Report (markdown):\n{report_markdown}\n"
    )

    text = _run_sync(_run_agent_once(api_key=api_key, agent=agent, prompt=prompt))
    return parse_email_draft(text, report_markdown)
