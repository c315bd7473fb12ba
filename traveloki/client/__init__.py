"""
HTTP client for the Traveloki API.

Responsibilities:
- Wrap every REST operation in a typed method.
- Keep the login token and user in an explicit ``Session`` value that the
  caller loads, stores and clears.
"""
