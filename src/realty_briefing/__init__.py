"""
Realty briefing service.

Provides:
- News CRUD backed by an async SQL store
- AI schedule briefings via the Gemini API (retry + OpenAI-compatible fallback)
"""
