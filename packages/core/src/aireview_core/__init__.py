"""Core review pipeline for ai-review."""
