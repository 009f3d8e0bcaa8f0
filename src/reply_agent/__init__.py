"""
Reply Agent package.

Provides:
- Prompt construction for WhatsApp-style reply drafting
- Pluggable generation gateways (OpenAI-compatible HTTP; local GGUF via llama.cpp)
- Output sanitization and an offline rule-based fallback
- FastAPI service and a command-line runner
"""
