"""Utility modules for bbclip: clipboard tools, logging, paths and locks."""
