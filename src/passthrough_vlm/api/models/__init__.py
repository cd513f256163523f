"""
Pydantic models for API request/response schemas.

These are the contract between HTTP clients and the pipeline, kept separate
from the pipeline's internal types.
"""
