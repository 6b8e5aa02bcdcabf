"""
Core utilities shared by the persistence layer.

This package provides:
- Application-level settings (separate from DB settings)
- Structured logging configuration and tracing helpers
- The execution context threaded through every repository call
- Pagination parameters used by enumeration
"""
