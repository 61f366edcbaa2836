"""REST API for snippet management."""
