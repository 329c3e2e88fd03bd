"""Backpressure-aware byte streams."""

from .flow import DEFAULT_CHUNK_SIZE, FlowController, PausableReader, open_text_stream

__all__ = ["DEFAULT_CHUNK_SIZE", "FlowController", "PausableReader", "open_text_stream"]
