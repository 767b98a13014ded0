"""LLM completion providers and the capability used by the pipeline.

Use explicit imports:
    from ontologizer.llm.providers import CompletionProvider, get_provider
    from ontologizer.llm.models import LLMResponse, LLMError, UsageStats
    from ontologizer.llm.capability import LLMCapability
"""
