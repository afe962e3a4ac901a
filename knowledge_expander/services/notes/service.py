"""
Note composition service.

Turns an AI response into a finished Markdown note: front matter with
extracted tags, optional template, file name and save path. Also rewrites
the source note so the selection becomes a wiki link to the new note.

Nothing here touches the vault; the host writes the returned strings.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

import yaml

from knowledge_expander.services.ai import AIResponse, AIRouter
from knowledge_expander.services.config import ExpanderSettings
from knowledge_expander.services.keywords import KeywordExtractor

logger = logging.getLogger(__name__)

INVALID_FILENAME_CHARS_RE = re.compile(r'[\\/:*?"<>|]')
WHITESPACE_RE = re.compile(r'\s+')

MAX_TITLE_LENGTH = 50
MIN_WORD_BOUNDARY = 30
FALLBACK_TITLE = 'Expanded Knowledge'

MAX_ORIGINAL_TEXT_LENGTH = 200
CONTEXT_RADIUS = 5
CONTENT_PLACEHOLDER = '{{content}}'
NOTE_TYPE = 'knowledge-expansion'


@dataclass(frozen=True)
class SelectionContext:
    """Selection captured from the editor when the command was started."""
    file_path: str
    from_pos: Tuple[int, int]
    to_pos: Tuple[int, int]
    selected_text: str
    surrounding_context: str
    source_note_name: str


@dataclass
class GeneratedNote:
    """A note ready to be written by the host."""
    file_name: str
    path: str
    content: str
    response: AIResponse
    selected_text: str
    tags: List[str] = field(default_factory=list)

    @property
    def wiki_link(self) -> str:
        """Link replacing the selection in the source note."""
        return f"[[{self.file_name}|{self.selected_text}]]"


def utc_now() -> datetime:
    """Current time in UTC; note dates are always UTC."""
    return datetime.now(timezone.utc)


def to_utc(moment: datetime) -> datetime:
    """Convert an aware datetime to UTC. Naive values are taken to be UTC already."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc)


def sanitize_file_name(title: str) -> str:
    """Remove characters not allowed in file names and collapse whitespace."""
    title = INVALID_FILENAME_CHARS_RE.sub('', title)
    return WHITESPACE_RE.sub(' ', title).strip()


def generate_fallback_title(selection: str) -> str:
    """
    Derive a title from the selection when the model did not supply one.

    The sanitized selection is cut to 50 characters, and further back to the
    last space when that space lies past the 30th character.

    Args:
        selection: Selected text

    Returns:
        Title text, 'Expanded Knowledge' when nothing usable is left
    """
    title = sanitize_file_name(selection)

    if len(title) > MAX_TITLE_LENGTH:
        title = title[:MAX_TITLE_LENGTH].strip()
        last_space = title.rfind(' ')
        if last_space > MIN_WORD_BOUNDARY:
            title = title[:last_space]

    return title or FALLBACK_TITLE


def build_file_name(title: str, now: datetime) -> str:
    """File name without extension: ``YYYYMMDD_<title>``, date taken from ``now`` as given."""
    return f"{now.strftime('%Y%m%d')}_{sanitize_file_name(title)}"


def generate_front_matter(
    selected_text: str,
    source_note: str,
    tags: Sequence[str],
    now: datetime
) -> str:
    """
    Build the YAML front matter block of a generated note.

    Args:
        selected_text: Selection the note explains
        source_note: Name of the note the selection came from
        tags: Extracted tags
        now: Creation time

    Returns:
        Front matter including the ``---`` delimiters
    """
    data = {
        'type': NOTE_TYPE,
        'source': f"[[{source_note}]]",
        'original_text': selected_text[:MAX_ORIGINAL_TEXT_LENGTH],
        'created': now.strftime('%Y-%m-%dT%H:%M:%S'),
        'tags': list(tags),
        'aliases': [],
        'related': [],
    }
    body = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{body}---"


def render_note(front_matter: str, content: str, template: Optional[str] = None) -> str:
    """
    Assemble the note text.

    With a template, the first ``{{content}}`` placeholder receives the
    content and the front matter is left to the template. Without one, the
    note is the front matter, a blank line and the content.
    """
    if template:
        return template.replace(CONTENT_PLACEHOLDER, content, 1)
    return f"{front_matter}\n\n{content}"


def get_note_save_path(file_name: str, note_path: str = '', default_folder: str = '') -> str:
    """
    Vault-relative path for a new note.

    Args:
        file_name: File name without extension
        note_path: Folder configured in the settings
        default_folder: Host's default folder for new files, used when
            note_path is blank

    Returns:
        Path ending in ``.md``
    """
    base_path = note_path or default_folder or ''
    if base_path and not base_path.endswith('/'):
        base_path += '/'
    return f"{base_path}{file_name}.md"


def get_surrounding_context(lines: Sequence[str], cursor_line: int, radius: int = CONTEXT_RADIUS) -> str:
    """Lines within ``radius`` of the cursor line, each followed by a newline."""
    if not lines:
        return ''
    start = max(0, cursor_line - radius)
    end = min(len(lines) - 1, cursor_line + radius)
    return ''.join(f"{line}\n" for line in lines[start:end + 1])


def _offset(lines: Sequence[str], pos: Tuple[int, int]) -> int:
    line, ch = pos
    return sum(len(lines[i]) + 1 for i in range(line)) + ch


def replace_selection(content: str, ctx: SelectionContext, new_text: str) -> Tuple[str, bool]:
    """
    Replace the captured selection in the source note.

    The selection is located by its recorded (line, ch) positions. If the
    text there no longer matches (the note was edited meanwhile), the new
    text is appended to the end of the note instead.

    Returns:
        Tuple of (new content, True if the selection was replaced in place)
    """
    lines = content.split('\n')
    if ctx.to_pos[0] < len(lines):
        from_index = _offset(lines, ctx.from_pos)
        to_index = _offset(lines, ctx.to_pos)
        if content[from_index:to_index] == ctx.selected_text:
            return content[:from_index] + new_text + content[to_index:], True

    logger.warning(f"Selection in {ctx.file_path} was modified, appending link at end of file")
    return f"{content}\n\n{new_text}", False


def format_completion_notice(heading: str, note_name: str, response: AIResponse) -> str:
    """Notice text shown after a note was created."""
    return (
        f"✅ {heading}\n"
        f"📝 Note created: {note_name}\n"
        f"💰 Estimated cost: ${response.estimated_cost:.6f}\n"
        f"📊 Tokens: {response.total_tokens}"
    )


class KnowledgeNoteService:
    """
    Creates knowledge notes from editor selections.

    Combines the AI router and the keyword extractor the way the host
    plugin does: expand (or web search) the selection, tag the result
    using the selection as the title, and render the note.
    """

    def __init__(
        self,
        router: AIRouter,
        settings: ExpanderSettings,
        extractor: Optional[KeywordExtractor] = None
    ):
        self.router = router
        self.settings = settings
        self.extractor = extractor or KeywordExtractor(settings.max_tags)

    def update_settings(self, settings: ExpanderSettings) -> None:
        """Propagate saved settings to this service and its router."""
        if settings.max_tags != self.extractor.max_tags:
            self.extractor = KeywordExtractor(settings.max_tags)
        self.settings = settings
        self.router.update_settings(settings)

    def extract_tags(self, selected_text: str, content: str) -> List[str]:
        """Tags for a note, with the selection weighted as its title."""
        return self.extractor.extract_keywords(f"{selected_text}\n{content}", selected_text)

    def create_note(
        self,
        selection: SelectionContext,
        user_question: str = '',
        web_search: bool = False,
        template: Optional[str] = None,
        now: Optional[datetime] = None,
        default_folder: str = ''
    ) -> GeneratedNote:
        """
        Generate a note for a selection.

        Args:
            selection: Captured editor selection
            user_question: Optional extra question
            web_search: Use OpenAI web search instead of the configured provider
            template: Optional template text with a ``{{content}}`` placeholder,
                read by the host from settings.template_path
            now: Creation time (defaults to the current UTC time; aware
                values are converted to UTC)
            default_folder: Host default folder used when no note path is set

        Returns:
            GeneratedNote with file name, path and rendered content

        Raises:
            ServiceNotConfigured: If the required API key is missing
            IntegrationError: If the AI request fails
        """
        now = to_utc(now or utc_now())

        if web_search:
            response = self.router.web_search(
                selection.selected_text, selection.surrounding_context, user_question
            )
        else:
            response = self.router.expand(
                selection.selected_text, selection.surrounding_context, user_question
            )

        title = response.title or generate_fallback_title(selection.selected_text)
        file_name = build_file_name(title, now)

        tags = self.extract_tags(selection.selected_text, response.content)
        front_matter = generate_front_matter(
            selection.selected_text, selection.source_note_name, tags, now
        )
        content = render_note(front_matter, response.content, template)
        path = get_note_save_path(file_name, self.settings.note_path, default_folder)

        logger.info(f"Generated note {path} with {len(tags)} tags")

        return GeneratedNote(
            file_name=file_name,
            path=path,
            content=content,
            response=response,
            selected_text=selection.selected_text,
            tags=tags,
        )
