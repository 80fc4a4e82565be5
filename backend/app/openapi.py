"""Public import for the OpenAPI document builder."""
from .openapi_builder import build_openapi_spec  # noqa: F401

__all__ = ["build_openapi_spec"]
