import html
import json
import logging
import re
from typing import Any, Dict

import streamlit as st
from pydantic import ValidationError

from adk_extra_agents import (
    REPORT_FILENAME,
    build_report_pdf,
    email_agent_draft_email,
    fallback_email_draft,
    send_email_smtp,
)
from engine.career_analysis import AnalysisError, analyze_resume, analyze_swot
from engine.report import BOLD_RE, ITALIC_RE, SWOT_TITLES, is_bullet, split_sections, swot_to_md, swot_to_txt
from engine.resume_reader import ResumeUploadError, extract_resume_text
from engine.schemas import SWOT_FIELDS, CareerAnalysis, ResumeDetails, SwotText
from engine.settings import DEFAULT_MODEL, AppSettings, configure_logging, resolve_api_key
from engine.utils import missing_swot_fields, normalize_inputs_for_cache_key

SETTINGS = AppSettings.from_env()
configure_logging(SETTINGS.log_level)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Career Compass", layout="wide")

# Minimal CSS for the SWOT grid and themed report sections
st.markdown(
    """
    <style>
      .swot-card {
        border-radius: 16px;
        padding: 16px 18px;
        margin-bottom: 16px;
        border-left: 5px solid;
        box-shadow: 0 4px 14px rgba(0,0,0,0.06);
      }
      .swot-title { font-size: 1.15rem; font-weight: 800; margin-bottom: 8px; }
      .theme-strengths { background: #f0fdf4; border-left-color: #22c55e; }
      .theme-weaknesses { background: #fef3f2; border-left-color: #ef4444; }
      .theme-opportunities { background: #eff6ff; border-left-color: #3b82f6; }
      .theme-threats { background: #fefbeb; border-left-color: #f59e0b; }

      .report-card {
        border-radius: 12px;
        padding: 16px 20px;
        margin-bottom: 20px;
        border-left: 5px solid;
        box-shadow: 0 4px 14px rgba(0,0,0,0.06);
      }
      .report-title { font-size: 1.2rem; font-weight: 800; margin-bottom: 10px; }
      .report-title small { float: right; font-weight: 400; opacity: 0.7; font-size: 0.75rem; }
      .report-note { font-style: italic; padding: 10px 12px; border-radius: 8px; background: rgba(255,255,255,0.7); }
      .report-card ul, .report-card ol { padding-left: 1.2rem; margin: 0 0 8px 0; }
      .section-career { background: #eff6ff; border-left-color: #3b82f6; }
      .section-skills { background: #f0fdf4; border-left-color: #22c55e; }
      .section-action { background: #fff7ed; border-left-color: #f97316; }
      .section-threat { background: #fef2f2; border-left-color: #ef4444; }
      .section-strength { background: #fefce8; border-left-color: #eab308; }
      .section-industry { background: #eef2ff; border-left-color: #6366f1; }
      .section-next { background: #f0fdfa; border-left-color: #14b8a6; }
      .section-general { background: #faf5ff; border-left-color: #a855f7; }
    </style>
    """,
    unsafe_allow_html=True,
)

# ----------------------------
# Session state initialization
# ----------------------------
DEFAULT_STATE = {
    "result": None,  # CareerAnalysis of the last successful run
    "error": "",
    "api_key": "",
    "pdf_bytes": b"",
    "email_subject": "",
    "email_body": "",
}

for k, v in DEFAULT_STATE.items():
    if k not in st.session_state:
        st.session_state[k] = v


def reset_state() -> None:
    keep_api_key = st.session_state.get("api_key", "")
    for k, v in DEFAULT_STATE.items():
        st.session_state[k] = v
    st.session_state["api_key"] = keep_api_key


# ----------------------------
# Caching wrapper
# ----------------------------
@st.cache_data(show_spinner=False)
def _cached_analyze_swot(normalized_inputs: Dict[str, Any], _swot: SwotText, _api_key: str, model: str) -> CareerAnalysis:
    # Leading underscores keep the SWOT object and the API key out of the cache key.
    return analyze_swot(_swot, api_key=_api_key, model=model)


# -------------
# Sidebar
# -------------
with st.sidebar:
    st.header("Settings")

    st.session_state.api_key = st.text_input(
        "Gemini API key",
        type="password",
        value=st.session_state.api_key or "",
        help="Stored only in session state. Falls back to GEMINI_API_KEY.",
    )

    model_options = [SETTINGS.model] + [m for m in (DEFAULT_MODEL, "gemini-2.5-pro", "gemini-2.0-flash") if m != SETTINGS.model]
    model = st.selectbox("Model", options=model_options, index=0)

    use_cache = st.checkbox(
        "Use caching",
        value=True,
        help="Reuses a manual analysis for identical SWOT input (not keyed by API key).",
    )

    if st.button("Clear / Restart", use_container_width=True):
        reset_state()
        st.rerun()

api_key = resolve_api_key(st.session_state.api_key, SETTINGS)


def _store_result(result: CareerAnalysis) -> None:
    st.session_state.result = result
    st.session_state.pdf_bytes = b""
    st.session_state.email_subject = ""
    st.session_state.email_body = ""


# -------------
# Input forms
# -------------
def render_inputs() -> None:
    st.title("Career Analysis")
    st.write(
        "Complete your SWOT analysis to get personalized career recommendations powered by AI, "
        "or upload your resume and let the AI draft the SWOT for you."
    )

    manual_tab, resume_tab = st.tabs(["Manual SWOT Analysis", "Resume Upload"])

    with manual_tab:
        placeholders = {
            "strengths": "List your key strengths, skills, and advantages...",
            "weaknesses": "Identify areas for improvement and limitations...",
            "opportunities": "External opportunities you can leverage...",
            "threats": "External challenges or obstacles...",
        }
        form = {
            f: st.text_area(SWOT_TITLES[f], value="", height=110, placeholder=placeholders[f], key=f"swot_{f}")
            for f in SWOT_FIELDS
        }
        missing = missing_swot_fields(form)

        if st.button("Analyze My Profile", type="primary", use_container_width=True, disabled=bool(missing)):
            st.session_state.error = ""
            try:
                swot = SwotText(**{f: form[f].strip() for f in SWOT_FIELDS})
                with st.spinner("Analyzing Profile..."):
                    if use_cache:
                        normalized = normalize_inputs_for_cache_key({**swot.model_dump(), "model": model})
                        result = _cached_analyze_swot(normalized, swot, api_key, model)
                    else:
                        result = analyze_swot(swot, api_key=api_key, model=model)
                _store_result(result)
                st.rerun()
            except ValidationError:
                st.session_state.error = "Please fill in all SWOT fields before analyzing."
            except AnalysisError as e:
                st.session_state.error = str(e)

        if missing:
            st.caption("Fill in all four fields to enable analysis.")

    with resume_tab:
        upload = st.file_uploader(
            "Upload your resume",
            type=["pdf", "doc", "docx", "txt"],
            help="Supported formats: PDF, DOC, DOCX, TXT (Max 5MB)",
        )
        name = st.text_input("Full Name *", value="", key="resume_name")
        email = st.text_input("Email Address *", value="", key="resume_email")
        experience = st.text_input("Years of Experience", value="", placeholder="e.g., 5", key="resume_experience")

        ready = bool(upload is not None and name.strip() and email.strip())
        if st.button("Upload & Analyze Resume", type="primary", use_container_width=True, disabled=not ready):
            st.session_state.error = ""
            try:
                details = ResumeDetails(name=name, email=email, experience=experience)
                resume_text = extract_resume_text(upload.name, upload.getvalue(), upload.type)
                with st.spinner("Analyzing Resume..."):
                    result = analyze_resume(resume_text, details, api_key=api_key, model=model)
                _store_result(result)
                st.rerun()
            except ValidationError as e:
                st.session_state.error = "; ".join(err["msg"] for err in e.errors())
            except (ResumeUploadError, AnalysisError) as e:
                st.session_state.error = str(e)

        if not ready:
            st.caption(("Upload a resume file" if upload is None else "Fill in required fields") + " to enable analysis")


# ----------------------------
# Rendering helpers
# ----------------------------
NUMBERED_RE = re.compile(r"^(\d+)\.\s*")


def _inline(text: str) -> str:
    t = html.escape(text)
    t = BOLD_RE.sub(r"<strong>\1</strong>", t)
    return ITALIC_RE.sub(r"<em>\1</em>", t)


def section_body_html(body: str) -> str:
    out = []
    for raw in body.split("\n"):
        line = raw.strip()
        if not line:
            continue
        if line.startswith("[") and line.endswith("]"):
            out.append(f'<div class="report-note">{_inline(line[1:-1])}</div>')
        elif is_bullet(line):
            out.append(f"<ul><li>{_inline(line[1:].strip())}</li></ul>")
        elif NUMBERED_RE.match(line):
            num = NUMBERED_RE.match(line).group(1)
            out.append(f'<ol start="{num}"><li>{_inline(NUMBERED_RE.sub("", line))}</li></ol>')
        elif line.endswith(":") and len(line) < 100:
            out.append(f"<h4>{_inline(line)}</h4>")
        else:
            out.append(f"<p>{_inline(line)}</p>")
    return "".join(out)


def render_card(title: str, text: str, theme_class: str) -> None:
    body = html.escape(text).replace("\n", "<br>")
    st.markdown(
        f"""
        <div class="swot-card {theme_class}">
          <div class="swot-title">{html.escape(title)}</div>
          <div>{body}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_results(result: CareerAnalysis) -> None:
    st.title("Your Career Analysis")
    st.write("AI-powered insights and recommendations based on your SWOT analysis.")
    if result.source == "resume":
        st.caption("SWOT fields were extracted automatically from the resume review and may be approximate.")

    if st.button("Start New Analysis", use_container_width=True):
        reset_state()
        st.rerun()

    st.subheader("SWOT Analysis Summary")
    for row in (SWOT_FIELDS[:2], SWOT_FIELDS[2:]):
        for col, field in zip(st.columns(2), row):
            with col:
                render_card(SWOT_TITLES[field], getattr(result.swot, field), f"theme-{field}")

    st.subheader("AI-Powered Career Insights")
    sections = split_sections(result.analysis)
    if not sections:
        st.write("- No analysis available.")
    for i, section in enumerate(sections, start=1):
        st.markdown(
            f"""
            <div class="report-card section-{section.theme}">
              <div class="report-title">{html.escape(section.title)} <small>Section {i}</small></div>
              {section_body_html(section.body)}
            </div>
            """,
            unsafe_allow_html=True,
        )

    # ----------------------------
    # Export / download
    # ----------------------------
    st.subheader("Download")

    txt_data = swot_to_txt(result)
    md_data = swot_to_md(result)
    json_data = json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2)

    if not st.session_state.pdf_bytes:
        try:
            st.session_state.pdf_bytes = build_report_pdf(result)
        except Exception as e:  # noqa: BLE001
            logger.exception("PDF export failed")
            st.error(f"PDF creation failed: {e}")

    d1, d2, d3, d4 = st.columns(4)
    with d1:
        if st.session_state.pdf_bytes:
            st.download_button(
                label="Download PDF",
                data=st.session_state.pdf_bytes,
                file_name=REPORT_FILENAME,
                mime="application/pdf",
                use_container_width=True,
            )
    with d2:
        st.download_button("Download TXT", data=txt_data, file_name="career-analysis.txt", mime="text/plain", use_container_width=True)
    with d3:
        st.download_button("Download Markdown", data=md_data, file_name="career-analysis.md", mime="text/markdown", use_container_width=True)
    with d4:
        st.download_button("Download JSON", data=json_data, file_name="career-analysis.json", mime="application/json", use_container_width=True)

    # ----------------------------
    # Share
    # ----------------------------
    st.subheader("Share Results")
    recipient_email = st.text_input("Recipient email", value="", key="recipient_email")
    recipient_name = st.text_input("Recipient name (optional)", value="", key="recipient_name")

    if st.button("Draft email", use_container_width=True):
        try:
            with st.spinner("Drafting email..."):
                draft = email_agent_draft_email(
                    api_key=api_key,
                    report_markdown=md_data,
                    recipient_name=recipient_name,
                    model=model,
                )
        except Exception as e:  # noqa: BLE001
            logger.exception("Email draft failed")
            st.warning(f"Email draft failed ({e}); using a standard message instead.")
            draft = fallback_email_draft(md_data)
        st.session_state.email_subject = draft.subject
        st.session_state.email_body = draft.body

    if st.session_state.email_subject or st.session_state.email_body:
        subject = st.text_input("Subject", value=st.session_state.email_subject, key="email_subject_view")
        body = st.text_area("Body", value=st.session_state.email_body, height=180, key="email_body_view")

        with st.expander("Send via SMTP", expanded=False):
            smtp_host = st.text_input("SMTP host", value=SETTINGS.smtp_host, key="smtp_host")
            smtp_port = st.number_input("SMTP port", value=SETTINGS.smtp_port, key="smtp_port")
            smtp_user = st.text_input("SMTP user", value=SETTINGS.smtp_user, key="smtp_user")
            smtp_password = st.text_input("SMTP password", value=SETTINGS.smtp_password, type="password", key="smtp_password")
            sender = st.text_input("From (sender)", value=SETTINGS.smtp_sender, key="smtp_sender")
            attach_pdf = st.checkbox("Attach PDF report", value=True, key="attach_pdf")

            if st.button("Send email now", use_container_width=True, key="send_email_now"):
                if not recipient_email.strip():
                    st.error("Recipient email is required.")
                else:
                    try:
                        send_email_smtp(
                            smtp_host=smtp_host,
                            smtp_port=int(smtp_port),
                            smtp_user=smtp_user,
                            smtp_password=smtp_password,
                            sender=sender,
                            recipient=recipient_email.strip(),
                            subject=subject or "My Career Analysis Report",
                            body=body or md_data,
                            attachment=st.session_state.pdf_bytes if attach_pdf else None,
                        )
                        st.success("Email sent.")
                    except Exception as e:  # noqa: BLE001
                        logger.exception("Sending report email failed")
                        st.error(f"Sending failed: {e}")

    # ----------------------------
    # Debug expander
    # ----------------------------
    with st.expander("Debug", expanded=False):
        st.write("**Source**")
        st.write(result.source)

        st.write("**Raw model output**")
        st.code(result.analysis or "", language="text")

        st.write("**SWOT fields**")
        st.code(json.dumps(result.swot.model_dump(), ensure_ascii=False, indent=2), language="json")


# ----------------------------
# Page flow
# ----------------------------
if st.session_state.result is None:
    render_inputs()
else:
    render_results(st.session_state.result)

if st.session_state.error:
    st.error(st.session_state.error)
