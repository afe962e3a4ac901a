"""
Tests for keyword extraction.
"""

from unittest import TestCase

from knowledge_expander.services.keywords import (
    KeywordExtractor,
    extract_general_keywords,
    extract_numbers,
    extract_proper_nouns,
)
from knowledge_expander.services.keywords.extractor import (
    count_frequency,
    get_top_keywords,
    is_stopword,
)


class StopwordTestCase(TestCase):
    """Test stop word handling."""

    def test_korean_and_english_stopwords(self):
        self.assertTrue(is_stopword('있다'))
        self.assertTrue(is_stopword('the'))
        self.assertTrue(is_stopword('The'))
        self.assertFalse(is_stopword('반도체'))
        self.assertFalse(is_stopword('Apple'))

    def test_only_stopwords_yield_no_tags(self):
        """Test that text made of stop words produces no tags."""
        extractor = KeywordExtractor()
        self.assertEqual(extractor.extract_keywords('the and of 있다 없다 이 그'), [])

    def test_capitalized_stopword_is_dropped(self):
        self.assertEqual(extract_general_keywords('The Has Been'), [])


class GeneralKeywordTestCase(TestCase):
    """Test general keyword extraction."""

    def test_korean_words_then_english(self):
        keywords = extract_general_keywords('Apple은 새로운 반도체를 Samsung과 함께 발표했다')

        self.assertEqual(keywords[:3], ['새로운', '반도체를', '함께'])
        self.assertIn('Apple', keywords)
        self.assertIn('Samsung', keywords)
        self.assertLess(keywords.index('함께'), keywords.index('Apple'))

    def test_short_and_lowercase_words_are_skipped(self):
        keywords = extract_general_keywords('a 가 AI Go python Rust')
        self.assertEqual(keywords, ['Rust'])


class ProperNounTestCase(TestCase):
    """Test proper noun extraction."""

    def test_company_with_marker(self):
        nouns = extract_proper_nouns('주식회사 카카오 발표')
        self.assertIn('카카오 발표', nouns)

    def test_capitalized_sequence(self):
        nouns = extract_proper_nouns('We met at New York City yesterday.')
        self.assertIn('New York City', nouns)

    def test_acronyms(self):
        nouns = extract_proper_nouns('The NASA and ESA missions')
        self.assertIn('NASA', nouns)
        self.assertIn('ESA', nouns)

    def test_stopword_candidates_are_dropped(self):
        nouns = extract_proper_nouns('The And')
        self.assertNotIn('The', nouns)
        self.assertNotIn('The And', nouns)


class NumberTestCase(TestCase):
    """Test amount, date and quantity extraction."""

    def test_dates_and_quantities(self):
        numbers = extract_numbers('이것은 테스트입니다 2025년 1월15일에 1,000명이 참가했다')

        self.assertIn('2025년', numbers)
        self.assertIn('1월15일', numbers)
        self.assertIn('1,000명', numbers)

    def test_money(self):
        numbers = extract_numbers('매출 1조원, 비용 5만원, 수수료 300원')
        self.assertEqual(numbers[:3], ['1조원', '5만원', '300원'])

    def test_counts(self):
        numbers = extract_numbers('100건 처리, 3회 반복, 7개 항목')
        self.assertEqual(numbers, ['100건', '3회', '7개'])


class RankingTestCase(TestCase):
    """Test frequency ranking."""

    def test_ties_keep_first_seen_order(self):
        freq = count_frequency(['b', 'a', 'b', 'a', 'c'])
        self.assertEqual(get_top_keywords(freq, 3), ['b', 'a', 'c'])

    def test_top_n_limits_result(self):
        freq = count_frequency(['x', 'y', 'y', 'z', 'z', 'z'])
        self.assertEqual(get_top_keywords(freq, 2), ['z', 'y'])


class KeywordExtractorTestCase(TestCase):
    """Test the keyword extractor."""

    def test_title_outweighs_body_frequency(self):
        """Test that title words rank above frequent body words."""
        extractor = KeywordExtractor(max_tags=5)

        tags = extractor.extract_keywords(
            'Acme, Acme, Widget, Widget, Widget.',
            title='Acme Corp announces Acme deal',
        )

        self.assertIn('Acme', tags)
        self.assertIn('Widget', tags)
        self.assertLess(tags.index('Acme'), tags.index('Widget'))

    def test_result_is_distinct_and_bounded(self):
        extractor = KeywordExtractor(max_tags=3)
        text = '인공지능 반도체 데이터센터 클라우드 인공지능 반도체 인공지능 NVIDIA'

        tags = extractor.extract_keywords(text)

        # Adjacent Hangul words also match the company pattern
        self.assertEqual(tags, ['인공지능 반도체', 'NVIDIA', '인공지능'])

    def test_empty_text(self):
        self.assertEqual(KeywordExtractor().extract_keywords(''), [])

    def test_numbers_become_tags(self):
        tags = KeywordExtractor().extract_keywords('2025년 행사에 1,000명이 모였다')
        self.assertIn('2025년', tags)
        self.assertIn('1,000명', tags)

    def test_invalid_max_tags(self):
        for value in [0, -1, True, '5', 2.5]:
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    KeywordExtractor(max_tags=value)
