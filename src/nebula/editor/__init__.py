"""Editor-side services built on the engine: sessions, autosave, files, search."""
