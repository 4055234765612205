"""Prism command-line interface (Typer + Rich)."""
