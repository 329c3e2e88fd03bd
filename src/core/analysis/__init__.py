"""Phase 1: pre-counting lines and validating file structure."""

from .line_counter import EDGE_GROUP_SIZE, LineCounter, validate_line_count

__all__ = ["EDGE_GROUP_SIZE", "LineCounter", "validate_line_count"]
