"""
Tests for note composition.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest import TestCase
from unittest.mock import MagicMock, patch

import yaml

from knowledge_expander.services.ai import AIResponse, AIRouter
from knowledge_expander.services.config import ExpanderSettings
from knowledge_expander.services.exceptions import ServiceNotConfigured
from knowledge_expander.services.notes import (
    KnowledgeNoteService,
    SelectionContext,
    format_completion_notice,
    generate_fallback_title,
    get_surrounding_context,
    replace_selection,
)
from knowledge_expander.services.notes.service import (
    build_file_name,
    generate_front_matter,
    get_note_save_path,
    render_note,
    sanitize_file_name,
)


def make_response(title='양자 얽힘 개요', content='## 개요\n양자 얽힘은 두 입자의 상태가 연결되는 현상이다.'):
    return AIResponse(
        title=title,
        content=content,
        input_tokens=120,
        output_tokens=80,
        total_tokens=200,
        estimated_cost=0.000066,
        provider='openai',
        model='gpt-4o-mini',
    )


def parse_front_matter(note):
    """Split a rendered note into its decoded front matter and body."""
    _, front_matter, body = note.split('---\n', 2)
    return yaml.safe_load(front_matter), body


class FileNameTestCase(TestCase):
    """Test title and file name helpers."""

    def test_sanitize_file_name(self):
        self.assertEqual(sanitize_file_name('a/b:c*d?"e"<f>|g'), 'abcdefg')
        self.assertEqual(sanitize_file_name('  여러   공백\n줄바꿈 '), '여러 공백 줄바꿈')

    def test_fallback_title_short_selection(self):
        self.assertEqual(generate_fallback_title('양자 얽힘'), '양자 얽힘')

    def test_fallback_title_cuts_at_word_boundary(self):
        """Test that long selections are cut back to the last space."""
        title = generate_fallback_title('word ' * 15)

        self.assertEqual(title, ' '.join(['word'] * 9))
        self.assertLessEqual(len(title), 50)

    def test_fallback_title_without_late_space(self):
        selection = 'x' * 20 + ' ' + 'y' * 60
        self.assertEqual(generate_fallback_title(selection), 'x' * 20 + ' ' + 'y' * 29)

    def test_fallback_title_for_unusable_selection(self):
        self.assertEqual(generate_fallback_title('???'), 'Expanded Knowledge')
        self.assertEqual(generate_fallback_title('   '), 'Expanded Knowledge')

    def test_build_file_name(self):
        self.assertEqual(
            build_file_name('제목: 테스트?', datetime(2025, 1, 15, 9, 5)),
            '20250115_제목 테스트'
        )

    def test_get_note_save_path(self):
        self.assertEqual(get_note_save_path('note', 'Knowledge'), 'Knowledge/note.md')
        self.assertEqual(get_note_save_path('note', 'Knowledge/'), 'Knowledge/note.md')
        self.assertEqual(get_note_save_path('note', '', 'Inbox'), 'Inbox/note.md')
        self.assertEqual(get_note_save_path('note'), 'note.md')


class FrontMatterTestCase(TestCase):
    """Test front matter and note rendering."""

    def test_front_matter_fields(self):
        front_matter = generate_front_matter(
            '양자 얽힘', '물리학 노트', ['양자', 'EPR'], datetime(2025, 1, 15, 10, 30)
        )

        self.assertTrue(front_matter.startswith('---\n'))
        self.assertTrue(front_matter.endswith('\n---'))
        data, _ = parse_front_matter(front_matter + '\n')
        self.assertEqual(data, {
            'type': 'knowledge-expansion',
            'source': '[[물리학 노트]]',
            'original_text': '양자 얽힘',
            'created': '2025-01-15T10:30:00',
            'tags': ['양자', 'EPR'],
            'aliases': [],
            'related': [],
        })

    def test_original_text_is_truncated(self):
        front_matter = generate_front_matter('가' * 300, 'src', [], datetime(2025, 1, 1))
        data, _ = parse_front_matter(front_matter + '\n')
        self.assertEqual(data['original_text'], '가' * 200)

    def test_special_characters_survive(self):
        """Test that YAML-significant characters round-trip through the front matter."""
        selection = 'key: "value" # not a comment'
        front_matter = generate_front_matter(selection, 'a: b', [], datetime(2025, 1, 1))
        data, _ = parse_front_matter(front_matter + '\n')
        self.assertEqual(data['original_text'], selection)
        self.assertEqual(data['source'], '[[a: b]]')

    def test_render_without_template(self):
        self.assertEqual(render_note('---\na: 1\n---', '본문'), '---\na: 1\n---\n\n본문')

    def test_render_with_template(self):
        template = '# 확장 노트\n{{content}}\n\n{{content}}'
        self.assertEqual(
            render_note('---\na: 1\n---', '본문', template),
            '# 확장 노트\n본문\n\n{{content}}'
        )


class EditorHelpersTestCase(TestCase):
    """Test context capture and selection replacement."""

    def setUp(self):
        self.content = 'first line\nhello world\nlast line'
        self.ctx = SelectionContext(
            file_path='notes/source.md',
            from_pos=(1, 0),
            to_pos=(1, 5),
            selected_text='hello',
            surrounding_context='',
            source_note_name='source',
        )

    def test_surrounding_context(self):
        lines = [f'line {i}' for i in range(20)]

        context = get_surrounding_context(lines, 2)

        self.assertEqual(context, ''.join(f'line {i}\n' for i in range(8)))

    def test_surrounding_context_at_end(self):
        lines = [f'line {i}' for i in range(20)]
        context = get_surrounding_context(lines, 19)
        self.assertEqual(context, ''.join(f'line {i}\n' for i in range(14, 20)))

    def test_surrounding_context_empty(self):
        self.assertEqual(get_surrounding_context([], 0), '')

    def test_replace_selection_in_place(self):
        new_content, replaced = replace_selection(self.content, self.ctx, '[[note|hello]]')

        self.assertTrue(replaced)
        self.assertEqual(new_content, 'first line\n[[note|hello]] world\nlast line')

    def test_replace_multiline_selection(self):
        ctx = replace(self.ctx, from_pos=(0, 6), to_pos=(1, 5), selected_text='line\nhello')

        new_content, replaced = replace_selection(self.content, ctx, 'X')

        self.assertTrue(replaced)
        self.assertEqual(new_content, 'first X world\nlast line')

    def test_modified_selection_appends_link(self):
        """Test that an edited note gets the link appended instead."""
        content = 'first line\nchanged world\nlast line'

        new_content, replaced = replace_selection(content, self.ctx, '[[note|hello]]')

        self.assertFalse(replaced)
        self.assertEqual(new_content, content + '\n\n[[note|hello]]')

    def test_selection_past_end_appends_link(self):
        ctx = replace(self.ctx, from_pos=(9, 0), to_pos=(9, 5))

        new_content, replaced = replace_selection(self.content, ctx, 'X')

        self.assertFalse(replaced)
        self.assertTrue(new_content.endswith('\n\nX'))

    def test_completion_notice(self):
        notice = format_completion_notice('Knowledge expanded!', '20250115_제목', make_response())

        self.assertEqual(notice, (
            '✅ Knowledge expanded!\n'
            '📝 Note created: 20250115_제목\n'
            '💰 Estimated cost: $0.000066\n'
            '📊 Tokens: 200'
        ))


class KnowledgeNoteServiceTestCase(TestCase):
    """Test the note service."""

    def setUp(self):
        """Set up test fixtures."""
        self.settings = ExpanderSettings(openai_api_key='sk-test', note_path='Knowledge', max_tags=5)
        self.router = MagicMock(spec=AIRouter)
        self.router.expand.return_value = make_response()
        self.router.web_search.return_value = make_response(title='검색 제목')
        self.service = KnowledgeNoteService(self.router, self.settings)
        self.selection = SelectionContext(
            file_path='physics.md',
            from_pos=(3, 0),
            to_pos=(3, 5),
            selected_text='양자 얽힘',
            surrounding_context='주변 문장\n',
            source_note_name='physics',
        )
        self.now = datetime(2025, 1, 15, 10, 30)

    def test_create_note(self):
        note = self.service.create_note(self.selection, user_question='왜?', now=self.now)

        self.router.expand.assert_called_once_with('양자 얽힘', '주변 문장\n', '왜?')
        self.router.web_search.assert_not_called()
        self.assertEqual(note.file_name, '20250115_양자 얽힘 개요')
        self.assertEqual(note.path, 'Knowledge/20250115_양자 얽힘 개요.md')
        self.assertEqual(note.wiki_link, '[[20250115_양자 얽힘 개요|양자 얽힘]]')

        data, body = parse_front_matter(note.content)
        self.assertEqual(data['source'], '[[physics]]')
        self.assertEqual(data['created'], '2025-01-15T10:30:00')
        self.assertEqual(data['tags'], note.tags)
        self.assertIn('양자', ' '.join(note.tags))
        self.assertLessEqual(len(note.tags), 5)
        self.assertEqual(body, '\n## 개요\n양자 얽힘은 두 입자의 상태가 연결되는 현상이다.')

    def test_create_note_defaults_to_utc_time(self):
        """Test that the date prefix and created stamp come from UTC."""
        late_evening = datetime(2025, 1, 15, 23, 30, tzinfo=timezone.utc)

        with patch('knowledge_expander.services.notes.service.utc_now', return_value=late_evening):
            note = self.service.create_note(self.selection)

        self.assertEqual(note.file_name, '20250115_양자 얽힘 개요')
        data, _ = parse_front_matter(note.content)
        self.assertEqual(data['created'], '2025-01-15T23:30:00')

    def test_create_note_converts_aware_time_to_utc(self):
        seoul_morning = datetime(2025, 1, 16, 8, 30, tzinfo=timezone(timedelta(hours=9)))

        note = self.service.create_note(self.selection, now=seoul_morning)

        self.assertEqual(note.file_name, '20250115_양자 얽힘 개요')
        data, _ = parse_front_matter(note.content)
        self.assertEqual(data['created'], '2025-01-15T23:30:00')

    def test_create_note_with_web_search(self):
        note = self.service.create_note(self.selection, web_search=True, now=self.now)

        self.router.web_search.assert_called_once_with('양자 얽힘', '주변 문장\n', '')
        self.router.expand.assert_not_called()
        self.assertEqual(note.file_name, '20250115_검색 제목')

    def test_create_note_without_title_uses_selection(self):
        self.router.expand.return_value = make_response(title='')

        note = self.service.create_note(self.selection, now=self.now)

        self.assertEqual(note.file_name, '20250115_양자 얽힘')

    def test_create_note_with_template(self):
        note = self.service.create_note(
            self.selection, template='# 노트\n{{content}}', now=self.now
        )

        self.assertEqual(note.content, '# 노트\n## 개요\n양자 얽힘은 두 입자의 상태가 연결되는 현상이다.')

    def test_create_note_uses_default_folder(self):
        self.service.update_settings(replace(self.settings, note_path=''))

        note = self.service.create_note(self.selection, now=self.now, default_folder='Inbox')

        self.assertEqual(note.path, 'Inbox/20250115_양자 얽힘 개요.md')

    def test_router_errors_propagate(self):
        self.router.expand.side_effect = ServiceNotConfigured('OpenAI API key is not configured')

        with self.assertRaises(ServiceNotConfigured):
            self.service.create_note(self.selection, now=self.now)

    def test_update_settings(self):
        new_settings = replace(self.settings, max_tags=2)

        self.service.update_settings(new_settings)

        self.assertEqual(self.service.extractor.max_tags, 2)
        self.assertIs(self.service.settings, new_settings)
        self.router.update_settings.assert_called_once_with(new_settings)
