"""Live event source seam and an in-process implementation."""
