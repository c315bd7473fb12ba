"""
Recommendation moderation.

Responsibilities:
- Accept user-submitted candidate attractions as pending recommendations.
- Let administrators approve (publish) or reject each one exactly once.
- Let administrators create or delete published attractions directly.
"""
