"""
Knowledge Expander.

Expands a selected passage of a note into an AI-written explanation and tags
the generated note with automatically extracted keywords.
"""

__version__ = '0.1.0'
