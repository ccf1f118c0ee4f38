"""
Provider adapters for PitchCoach.

Contains one adapter per text-generation backend, all implementing the
AIProvider capability contract:
- Anthropic (Claude)
- Google Gemini
"""
