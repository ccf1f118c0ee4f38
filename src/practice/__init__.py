"""
Practice layer for PitchCoach.

Caller-side modules sitting on top of the router:
- Submission validation
- Practice service (feedback, topics, history)
- Progress tracking and reporting
"""
