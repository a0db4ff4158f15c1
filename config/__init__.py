"""Configuration constants and user settings for bbclip."""
