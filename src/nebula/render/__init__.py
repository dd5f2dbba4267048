"""Render-tree side of the engine: markdown rendering, highlights, and the bridge."""
