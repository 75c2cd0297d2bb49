"""Blogplan - page planning for a markdown blog with a glossary."""

__version__ = "0.1.0"
