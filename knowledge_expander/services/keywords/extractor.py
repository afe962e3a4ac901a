"""
Keyword extraction for tagging generated notes.

Tags are picked from a weighted bag of candidate terms:

- general keywords of the title, counted three times
- proper nouns of the body, counted twice
- general keywords of the body, counted once
- amounts, dates and counted quantities of the body, counted once

The most frequent candidates win; ties keep the order in which the
candidates were first seen.

Word boundaries in the English patterns are ASCII boundaries, so a Latin
word directly followed by a Korean particle (``Apple은``) is still found.
"""

import re
from collections import Counter
from typing import Iterable, List

# Korean stop words
STOPWORDS_KO = frozenset([
    '이', '그', '저', '것', '수', '등', '및', '의', '가', '을', '를',
    '에', '에서', '으로', '로', '와', '과', '도', '만', '하다',
    '있다', '없다', '되다', '이다', '아니다', '하고', '한다',
])

# English stop words, compared lower-cased
STOPWORDS_EN = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at',
    'to', 'for', 'of', 'with', 'by', 'from', 'is', 'was',
    'are', 'were', 'be', 'been', 'being', 'have', 'has', 'had',
])

TITLE_WEIGHT = 3
PROPER_NOUN_WEIGHT = 2

DEFAULT_MAX_TAGS = 20

# General keywords
KO_WORD_RE = re.compile(r'[가-힣]{2,}')
EN_WORD_RE = re.compile(r'\b[A-Z][a-zA-Z]{2,}\b', re.ASCII)

# Proper nouns
_NAME_WORD = r'(?:[가-힣]+|(?<![A-Za-z])[A-Z][A-Za-z]*)'
COMPANY_RE = re.compile(
    r'(?:주식회사|㈜|\(주\))?\s*(' + _NAME_WORD + r'(?:\s+' + _NAME_WORD + r')?)'
)
CAPITALIZED_SEQUENCE_RE = re.compile(r'\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+\b', re.ASCII)
ACRONYM_RE = re.compile(r'\b[A-Z]{2,}\b', re.ASCII)

# Numbers
MONEY_RE = re.compile(r'\d+(?:조|억|만)?원', re.ASCII)
DATE_RE = re.compile(r'\d{4}년|\d{1,2}월\d{1,2}일', re.ASCII)
COUNTED_QUANTITY_RE = re.compile(r'\d+(?:,\d{3})*(?:명|건|회|개)', re.ASCII)


def is_stopword(word: str) -> bool:
    """Return True if ``word`` is a Korean stop word or an English one (any case)."""
    return word in STOPWORDS_KO or word.lower() in STOPWORDS_EN


def _is_stopword_phrase(phrase: str) -> bool:
    return all(is_stopword(word) for word in phrase.split())


def extract_general_keywords(text: str) -> List[str]:
    """
    Extract Korean words of two or more syllables and capitalized English words.

    Args:
        text: Text to scan

    Returns:
        Matches in order (Korean first, then English), stop words removed
    """
    keywords = [word for word in KO_WORD_RE.findall(text) if word not in STOPWORDS_KO]
    keywords.extend(
        word for word in EN_WORD_RE.findall(text) if word.lower() not in STOPWORDS_EN
    )
    return keywords


def extract_proper_nouns(text: str) -> List[str]:
    """
    Extract likely proper nouns: company names, capitalized word runs and acronyms.

    The company pattern takes one or two capitalized or Hangul words after an
    optional 주식회사/㈜/(주) marker. The marker is optional, so the pattern
    also picks up plain Korean phrases; overlapping hits from the three
    patterns are expected and merge during frequency counting.

    Args:
        text: Text to scan

    Returns:
        Candidates in order: company names, capitalized runs, acronyms
    """
    proper_nouns = []

    # Company names (주식회사, ㈜, (주))
    for match in COMPANY_RE.finditer(text):
        company = match.group(1).strip()
        if len(company) >= 2:
            proper_nouns.append(company)

    # Capitalized consecutive words
    proper_nouns.extend(CAPITALIZED_SEQUENCE_RE.findall(text))

    # Acronyms
    proper_nouns.extend(ACRONYM_RE.findall(text))

    return [
        noun.strip() for noun in proper_nouns
        if noun.strip() and not _is_stopword_phrase(noun)
    ]


def extract_numbers(text: str) -> List[str]:
    """
    Extract money amounts, dates and counted quantities.

    Examples of matches: ``1조원``, ``5만원``, ``2025년``, ``1월15일``,
    ``3,370명``, ``100건``.
    """
    numbers = MONEY_RE.findall(text)
    numbers.extend(DATE_RE.findall(text))
    numbers.extend(COUNTED_QUANTITY_RE.findall(text))
    return numbers


def count_frequency(keywords: Iterable[str]) -> Counter:
    """Count occurrences; iteration order is first-seen order."""
    return Counter(keywords)


def get_top_keywords(freq: Counter, top_n: int) -> List[str]:
    """Return the ``top_n`` most frequent keywords, ties in first-seen order."""
    ranked = sorted(freq.items(), key=lambda item: -item[1])
    return [keyword for keyword, _ in ranked[:top_n]]


class KeywordExtractor:
    """
    Extracts ranked tags from a note's text and title.

    Stateless apart from ``max_tags``; one instance can be shared freely.
    """

    def __init__(self, max_tags: int = DEFAULT_MAX_TAGS):
        """
        Initialize the extractor.

        Args:
            max_tags: Maximum number of tags returned (positive)

        Raises:
            ValueError: If max_tags is not a positive integer
        """
        if isinstance(max_tags, bool) or not isinstance(max_tags, int) or max_tags < 1:
            raise ValueError(f"max_tags must be a positive integer, got {max_tags!r}")
        self.max_tags = max_tags

    def extract_keywords(self, text: str, title: str = '') -> List[str]:
        """
        Extract tags from text and title.

        Args:
            text: Body text
            title: Optional title; its keywords weigh three times as much

        Returns:
            At most ``max_tags`` distinct tags, most relevant first
        """
        keywords: List[str] = []

        # 1. Title keywords (weight 3x)
        if title:
            keywords.extend(extract_general_keywords(title) * TITLE_WEIGHT)

        # 2. Proper nouns (weight 2x)
        keywords.extend(extract_proper_nouns(text) * PROPER_NOUN_WEIGHT)

        # 3. General keywords from body
        keywords.extend(extract_general_keywords(text))

        # 4. Amounts, dates and quantities
        keywords.extend(extract_numbers(text))

        # 5. Rank by frequency
        return get_top_keywords(count_frequency(keywords), self.max_tags)
