"""
ga4gh_identity.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Request-scoped log context middleware.
"""

# Package marker.
