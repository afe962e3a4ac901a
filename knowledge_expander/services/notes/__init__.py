"""
Note composition service.

Builds the Markdown note for an expanded selection and the wiki link that
replaces the selection in the source note.
"""

from .service import (
    GeneratedNote,
    KnowledgeNoteService,
    SelectionContext,
    format_completion_notice,
    generate_fallback_title,
    get_surrounding_context,
    replace_selection,
)

__all__ = [
    'GeneratedNote',
    'KnowledgeNoteService',
    'SelectionContext',
    'format_completion_notice',
    'generate_fallback_title',
    'get_surrounding_context',
    'replace_selection',
]
