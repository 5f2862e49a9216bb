"""
Integration tests for Elelem.

Run against real external services and are skipped when they are missing:
- Redis cache backend (localhost:6379, database 15)
- OpenAI sessions end to end (OPENAI_API_KEY)
"""
