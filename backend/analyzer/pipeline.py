# analyzer/pipeline.py
# ─────────────────────────────────────────────────────────────────────────────
# Upload → analysis orchestrator.
#
# Flow (each failure is terminal and raises its own AppError):
#   1. Content type check          UnsupportedFormatError, nothing written
#   2. Temp file + text extraction ExtractionError, file removed either way
#   3. Prompt composition          (pure)
#   4. Claude completion           CompletionError
#   5. JSON recovery               ResponseFormatError
#   6. Mode agreement              ResponseFormatError
# ─────────────────────────────────────────────────────────────────────────────

import logging
import os
import tempfile
from typing import Optional

from errors import ResponseFormatError
from .extractor import SUPPORTED_TYPES, ensure_supported
from .prompts   import compose_prompt
from .sanitizer import parse_analysis

logger = logging.getLogger(__name__)


def extract_upload(data: bytes, content_type: str, extractor) -> str:
    """Write the upload to a temp file, extract its text, always remove the file."""
    mime = ensure_supported(content_type)

    fd, path = tempfile.mkstemp(prefix="resume_", suffix=SUPPORTED_TYPES[mime])
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        return extractor.extract(path, mime)
    finally:
        os.unlink(path)


def check_mode(analysis: dict, expected_mode: str, raw: str) -> dict:
    """Fill in a missing mode; reject a result built for the other schema."""
    declared = analysis.setdefault("mode", expected_mode)
    if declared != expected_mode:
        logger.error("Model answered in mode %r, expected %r", declared, expected_mode)
        raise ResponseFormatError(raw, detail=f"mode {declared!r} != {expected_mode!r}")
    return analysis


def run_analysis(
    data:            bytes,
    content_type:    str,
    job_description: Optional[str],
    extractor,
    completion_client,
) -> dict:
    """Full pipeline for one admitted upload. Returns the analysis dict."""

    # ── Step 1-2: Extract resume text ─────────────────────────────────────────
    resume_text = extract_upload(data, content_type, extractor)

    # ── Step 3: Compose the prompt ────────────────────────────────────────────
    mode, prompt = compose_prompt(resume_text, job_description)
    logger.info("Analysing resume (%d chars) in mode %s", len(resume_text), mode)

    # ── Step 4-5: Ask Claude, recover JSON ────────────────────────────────────
    raw = completion_client.complete(prompt)
    analysis = parse_analysis(raw)

    # ── Step 6: Result must follow the requested schema ───────────────────────
    return check_mode(analysis, mode, raw)
