"""normkit API package.

This module provides an optional FastAPI service layer around the
normalization engine and dot-path resolution.
"""

from .server import create_app  # noqa: F401
