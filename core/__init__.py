"""Clipboard history core: entries, persistence, image cache."""
