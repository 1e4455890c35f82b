"""Crawl the OSRS wiki and generate inlined CSS cursor constants."""

__version__ = "1.0.0"
