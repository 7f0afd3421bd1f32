"""Markdown to Anki deck converter.

Every heading of a markdown document becomes a flashcard:
- the heading is the front
- the content below it (up to the next heading) is the back
- split markers promote content into the front

The result is written as an Anki .apkg package.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
