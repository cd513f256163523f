"""Capture-to-inference pipeline: frame capture, payload building, transport and reply extraction."""

__version__ = "1.0.0"
