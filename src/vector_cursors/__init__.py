"""Render vector cursor themes to X11 Xcursor files."""
