"""
Live location tracking.

Responsibilities:
- Consume a stream of raw position fixes from a platform location source.
- Decide when the map view should be re-centered.
- Fan the best-known user position out to registered consumers.
"""
