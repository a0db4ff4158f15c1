"""Background services driving the clipboard history."""
