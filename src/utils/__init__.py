"""
Utility modules for PitchCoach.

Cross-cutting concerns:
- Parsing: Strip code fences and decode model JSON output
- Validation: Enforce the feedback/topic output contract
- Backoff: Retry delay computation
- Rounding: Half-up rounding for scores and averages
- Storage: File I/O helpers for sessions and progress
"""
