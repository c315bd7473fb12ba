"""
Attraction directory and search engine.

Responsibilities:
- Define the fixed category enumeration and its storage identifiers.
- Hold published attractions partitioned by category.
- Resolve a text query or a position to a single attraction.
"""
