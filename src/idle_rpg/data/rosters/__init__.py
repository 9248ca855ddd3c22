"""Bundled roster files."""
