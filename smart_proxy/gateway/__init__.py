"""Proxy Gateway Layer.

Routes OpenAI-format chat requests to a local Ollama or remote Grok
backend and returns OpenAI-format responses:
  - Provider Registry (endpoints, model names)
  - Routing Policy Engine (ordered override rules)
  - Provider Adapters (HTTP transport)
  - Response Normalizer (Ollama → chat.completion)
  - Proxy Gateway (dispatcher)
"""
