"""Turn a narrative career report into themed sections and text exports."""

import re
from typing import List

from engine.schemas import CareerAnalysis, ReportSection, SwotText

SWOT_TITLES = {
    "strengths": "Strengths",
    "weaknesses": "Weaknesses",
    "opportunities": "Opportunities",
    "threats": "Threats",
}

# Later rules override earlier ones, so a title like "Threat mitigation action plan" ends up as "threat".
THEME_RULES = [
    ("career", ("career",)),
    ("skills", ("skills",)),
    ("action", ("action", "plan")),
    ("threat", ("threat", "mitigation")),
    ("strength", ("strength", "leveraging")),
    ("industry", ("industry", "insight")),
    ("next", ("next", "step")),
]

BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
ITALIC_RE = re.compile(r"(?<!\*)\*(?!\*)(.+?)(?<!\*)\*(?!\*)")


def section_theme(title: str) -> str:
    t = (title or "").lower()
    theme = "general"
    for name, keywords in THEME_RULES:
        if any(k in t for k in keywords):
            theme = name
    return theme


def split_sections(report: str) -> List[ReportSection]:
    """
    Split a report on "##" markers. The first line of every chunk is its title.

    Text before the first marker becomes an "Overview" section.
    """
    sections: List[ReportSection] = []
    chunks = (report or "").split("##")

    lead = chunks[0].strip()
    if lead:
        sections.append(ReportSection(title="Overview", body=lead, theme="general"))

    for chunk in chunks[1:]:
        if not chunk.strip():
            continue
        lines = chunk.strip().split("\n")
        title = lines[0].strip().strip("#*").strip() or "Section"
        body = "\n".join(lines[1:]).strip()
        sections.append(ReportSection(title=title, body=body, theme=section_theme(title)))

    return sections


def is_bullet(line: str) -> bool:
    # "**Bold** text" is emphasis, not a bullet.
    return line[:1] in ("-", "•") or (line.startswith("*") and not line.startswith("**"))


def plain_line(line: str) -> str:
    """One report line without markdown emphasis, list markers or bracket wrapping."""
    s = line.strip()
    if s.startswith("[") and s.endswith("]"):
        s = s[1:-1].strip()
    prefix = ""
    if is_bullet(s):
        prefix, s = "- ", s[1:].strip()
    s = BOLD_RE.sub(r"\1", s)
    s = ITALIC_RE.sub(r"\1", s)
    return prefix + s


def body_lines(body: str) -> List[str]:
    return [plain_line(line) for line in (body or "").split("\n") if line.strip()]


def _swot_block(swot: SwotText, heading: str) -> List[str]:
    lines = []
    for field, title in SWOT_TITLES.items():
        lines.append(f"{heading}{title}")
        lines.append(getattr(swot, field))
        lines.append("")
    return lines


def swot_to_txt(result: CareerAnalysis) -> str:
    parts = [
        "Career Analysis Report",
        f"Generated on {result.generated_at:%Y-%m-%d}",
        "",
        "SWOT ANALYSIS SUMMARY",
        "",
    ]
    parts.extend(_swot_block(result.swot, ""))
    parts.append("AI-POWERED CAREER INSIGHTS")
    parts.append("")
    for section in split_sections(result.analysis):
        parts.append(section.title.upper())
        parts.extend(body_lines(section.body))
        parts.append("")

    return "\n".join(parts).strip() + "\n"


def swot_to_md(result: CareerAnalysis) -> str:
    parts = [
        "# Career Analysis Report",
        f"_Generated on {result.generated_at:%Y-%m-%d}_",
        "",
        "## SWOT Analysis Summary",
        "",
    ]
    parts.extend(_swot_block(result.swot, "### "))
    parts.append("## AI-Powered Career Insights")
    parts.append("")
    for section in split_sections(result.analysis):
        parts.append(f"### {section.title}")
        if section.body:
            parts.append(section.body)
        parts.append("")

    return "\n".join(parts).strip() + "\n"
