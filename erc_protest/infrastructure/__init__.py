"""Infrastructure adapters - browser, LLM, PDF, storage and HTTP."""
