"""Optional LLM review: prompt assembly, provider client and retry policy."""

from analyzer_engine.llm.client import LlmClient, has_llm_access
from analyzer_engine.llm.prompts import build_review_prompt
from analyzer_engine.llm.retry import retry_with_backoff

__all__ = [
    "LlmClient",
    "build_review_prompt",
    "has_llm_access",
    "retry_with_backoff",
]
