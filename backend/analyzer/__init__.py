from .extractor import TextExtractor, get_text_extractor
from .ai_parser import ClaudeCompletionClient, get_completion_client
from .prompts   import compose_prompt, MODE_RESUME_ONLY, MODE_RESUME_JD
from .sanitizer import parse_analysis
from .pipeline  import run_analysis

# Public surface
__all__ = [
    "TextExtractor", "get_text_extractor",
    "ClaudeCompletionClient", "get_completion_client",
    "compose_prompt", "MODE_RESUME_ONLY", "MODE_RESUME_JD",
    "parse_analysis",
    "run_analysis",
]
