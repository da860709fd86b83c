import logging
from typing import Optional

from engine.schemas import CareerAnalysis, ResumeDetails, SwotText
from engine.settings import DEFAULT_MODEL
from engine.swot_extractor import extract_swot
from engine.utils import MAX_RESUME_CHARS, MAX_SWOT_FIELD_CHARS, sanitize_text

logger = logging.getLogger(__name__)

# Sampling settings for the career report.
CAREER_GENERATION = {
    "temperature": 0.7,
    "top_p": 0.8,
    "top_k": 40,
    "max_output_tokens": 2048,
}

REPORT_SECTIONS = [
    ("CAREER PATH RECOMMENDATIONS", "Provide 3-5 specific career paths that align with their strengths and opportunities"),
    ("SKILLS DEVELOPMENT PLAN", "List specific skills to develop based on weaknesses and market opportunities"),
    ("ACTION PLAN", "Provide a step-by-step action plan with timelines"),
    ("LEVERAGING STRENGTHS", "How to maximize and utilize existing strengths"),
    ("THREAT MITIGATION", "Strategies to address and minimize threats"),
    ("INDUSTRY INSIGHTS", "Relevant industry trends and market analysis"),
    ("NEXT STEPS", "Immediate actionable steps to take within the next 30-90 days"),
]

CAREER_FAILURE = "Failed to analyze career profile. Please try again."
RESUME_FAILURE = "Failed to analyze resume. Please try again or use manual SWOT analysis."


class AnalysisError(RuntimeError):
    """An analysis could not be produced; the message is safe to show to the user."""


# ----------------------------
# LLM client abstraction
# ----------------------------
def _call_llm_gemini(prompt: str, api_key: str, model: str, generation: Optional[dict] = None) -> str:
    # Keep the dependency + call isolated in a single module.
    from llm_gemini import generate_text

    return generate_text(api_key=api_key, prompt=prompt, model=model, generation=generation).strip()


def build_career_prompt(swot: SwotText) -> str:
    sections = "\n\n".join(f"## {title}\n[{hint}]" for title, hint in REPORT_SECTIONS)

    return f"""
As a professional career counselor and AI analyst, please provide a comprehensive career analysis based on the following SWOT analysis:

STRENGTHS:
{sanitize_text(swot.strengths, MAX_SWOT_FIELD_CHARS)}

WEAKNESSES:
{sanitize_text(swot.weaknesses, MAX_SWOT_FIELD_CHARS)}

OPPORTUNITIES:
{sanitize_text(swot.opportunities, MAX_SWOT_FIELD_CHARS)}

THREATS:
{sanitize_text(swot.threats, MAX_SWOT_FIELD_CHARS)}

Please provide a detailed analysis in the following structured format:

{sections}

Please make the recommendations specific, actionable, and tailored to the individual's profile.
""".strip()


def build_resume_prompt(resume_text: str, details: ResumeDetails) -> str:
    return f"""
Analyze the following resume and create a SWOT analysis for career planning:

RESUME CONTENT:
{sanitize_text(resume_text, MAX_RESUME_CHARS)}

ADDITIONAL INFO:
Name: {details.name or 'Not provided'}
Email: {details.email or 'Not provided'}
Years of Experience: {details.experience or 'Not provided'}

Please provide:
1. SWOT Analysis (Strengths, Weaknesses, Opportunities, Threats)
2. Career recommendations
3. Skills gap analysis
4. Next steps for career advancement

Format the response in a structured manner suitable for career planning, using "## " headings
for Strengths, Weaknesses, Opportunities and Threats.
""".strip()


def _require_key(api_key: str) -> str:
    key = (api_key or "").strip()
    if not key:
        raise AnalysisError("No API key provided and GEMINI_API_KEY is not set.")
    return key


def analyze_swot(swot: SwotText, api_key: str, model: str = DEFAULT_MODEL) -> CareerAnalysis:
    """Manual flow: one Gemini call turning a SWOT self-assessment into a career report."""
    key = _require_key(api_key)
    prompt = build_career_prompt(swot)

    try:
        analysis = _call_llm_gemini(prompt=prompt, api_key=key, model=model, generation=CAREER_GENERATION)
    except Exception as e:
        logger.exception("Error analyzing career profile")
        raise AnalysisError(CAREER_FAILURE) from e

    if not analysis:
        logger.error("Gemini returned an empty career analysis")
        raise AnalysisError(CAREER_FAILURE)

    return CareerAnalysis(swot=swot, analysis=analysis, source="manual")


def analyze_resume(
    resume_text: str,
    details: ResumeDetails,
    api_key: str,
    model: str = DEFAULT_MODEL,
) -> CareerAnalysis:
    """
    Resume flow: ask Gemini for a SWOT-style review of the resume, then recover
    the four quadrants from its answer so they can be shown and re-submitted.
    """
    if not (resume_text or "").strip():
        raise AnalysisError("The uploaded resume contains no readable text.")

    key = _require_key(api_key)
    prompt = build_resume_prompt(resume_text, details)

    try:
        analysis = _call_llm_gemini(prompt=prompt, api_key=key, model=model)
    except Exception as e:
        logger.exception("Error analyzing resume")
        raise AnalysisError(RESUME_FAILURE) from e

    if not analysis:
        logger.error("Gemini returned an empty resume analysis")
        raise AnalysisError(RESUME_FAILURE)

    swot = extract_swot(analysis)
    return CareerAnalysis(swot=swot, analysis=analysis, source="resume")
