from app.llm.client import (
    CompletionProvider,
    FallbackCompletionClient,
    LLMServiceError,
    OpenRouterProvider,
)
from app.llm.rewriter import ContentRewriter, RewriteError
from app.llm.schemas import RewriteResult

__all__ = [
    "CompletionProvider",
    "ContentRewriter",
    "FallbackCompletionClient",
    "LLMServiceError",
    "OpenRouterProvider",
    "RewriteError",
    "RewriteResult",
]
