# analyzer/prompts.py
# ─────────────────────────────────────────────────────────────────────────────
# The single analysis prompt.
#
# Both response schemas are always shown so the model sees the contrast;
# the trailing "Mode to use" line tells it which one to follow.
# ─────────────────────────────────────────────────────────────────────────────

from typing import Optional, Tuple

MODE_RESUME_ONLY = "resume_only"
MODE_RESUME_JD   = "resume_jd"

_ANALYSIS_PROMPT = """
You are a professional ATS (Applicant Tracking System).

Analyze the resume text provided.

RULES:
- Respond ONLY in valid JSON
- No markdown
- No explanations outside JSON
- Follow the schema strictly

Resume Text:
{resume_text}

{job_section}

JSON RESPONSE SCHEMA:

If mode = resume_only:
{{
  "mode": "resume_only",
  "ats_score": number,
  "strengths": [string],
  "weaknesses": [string],
  "enhancements": [string],
  "section_feedback": {{
    "skills": string,
    "projects": string,
    "experience": string,
    "education": string
  }}
}}

If mode = resume_jd:
{{
  "mode": "resume_jd",
  "ats_score": number,
  "keyword_match": number,
  "matched_keywords": [string],
  "missing_keywords": [string],
  "strengths": [string],
  "weaknesses": [string],
  "enhancements": [string],
  "section_feedback": {{
    "skills": string,
    "projects": string,
    "experience": string,
    "education": string
  }}
}}

Mode to use: {mode}
"""


def select_mode(job_description: Optional[str]) -> Tuple[str, str]:
    """Return (mode, trimmed job description). Blank descriptions count as absent."""
    jd = (job_description or "").strip()
    return (MODE_RESUME_JD if jd else MODE_RESUME_ONLY), jd


def compose_prompt(resume_text: str, job_description: Optional[str] = None) -> Tuple[str, str]:
    """Build (mode, prompt) for one analysis. Pure string work."""
    mode, jd = select_mode(job_description)
    job_section = f"Job Description:\n{jd}" if jd else ""
    prompt = _ANALYSIS_PROMPT.format(
        resume_text=resume_text or "",
        job_section=job_section,
        mode=mode,
    )
    return mode, prompt
