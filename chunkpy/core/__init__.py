"""Core components of chunkpy."""
