"""Dots: dependency-aware issue records stored as markdown files."""
