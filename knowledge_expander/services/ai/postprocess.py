"""
Post-processing of raw model output.

Models often wrap Markdown answers in a code fence and are asked to put a
``제목:`` line first. These helpers undo the fence and split the title off.
"""

import re
from typing import Tuple

# Openers are checked in this order; the bare fence is a prefix of the others
CODE_FENCE_OPENERS = ('```markdown', '```md', '```')
CODE_FENCE = '```'

TITLE_MARKERS = ('제목:', '제목 :')
TITLE_PREFIX_RE = re.compile(r'^제목\s*:\s*')


def strip_markdown_code_block(content: str) -> str:
    """
    Remove one surrounding Markdown code fence.

    Args:
        content: Raw model output

    Returns:
        Trimmed text without a leading fence opener or trailing fence
    """
    result = content.strip()

    for opener in CODE_FENCE_OPENERS:
        if result.startswith(opener):
            result = result[len(opener):]
            break

    if result.endswith(CODE_FENCE):
        result = result[:-len(CODE_FENCE)]

    return result.strip()


def parse_response(raw_content: str) -> Tuple[str, str]:
    """
    Split a ``제목:`` title line from the body.

    Args:
        raw_content: Model output, already stripped of code fences

    Returns:
        Tuple of (title, content). The title is '' when the first line does
        not carry the marker, in which case content is the whole text.

    Example:
        >>> parse_response('제목: 테스트 제목\\n\\n본문 내용')
        ('테스트 제목', '본문 내용')
    """
    lines = raw_content.strip().split('\n')
    title = ''
    content_start = 0

    if lines[0].startswith(TITLE_MARKERS):
        title = TITLE_PREFIX_RE.sub('', lines[0]).strip()
        content_start = 1

        # Skip blank lines between the title and the body
        while content_start < len(lines) and lines[content_start].strip() == '':
            content_start += 1

    content = '\n'.join(lines[content_start:]).strip()

    return title, content
