"""
FastAPI application layer for the capture pipeline.

Exposes HTTP endpoints to trigger a capture, send text-only prompts, manage
the API key and toggle the image source, so a headset client or a local
tool can drive the pipeline without importing it.
"""
