"""
Prompt templates for knowledge expansion and web search.

Both templates ask the model to open its reply with a ``제목: <title>`` line
so that the title can be split from the body afterwards.
"""

from .schemas import AIRequestContext

TITLE_INSTRUCTION = (
    '반드시 응답의 첫 줄에 이 내용을 요약하는 간결한 제목을 작성해주세요. '
    '제목은 "제목: "으로 시작하고, 20자 이내로 작성합니다.'
)

WEB_SEARCH_INSTRUCTION = '다음 텍스트에 대해 웹 검색을 통해 최신 정보와 관련 내용을 찾아 설명해주세요.'

WEB_SEARCH_FORMAT_INSTRUCTION = (
    "1000자 이내로 작성하고, md 파일의 마크다운 형태를 유지해주세요. "
    "기본적인 소제목은 '##'를 사용하고, 최대 '###'까지만 사용합니다."
)

WEB_SEARCH_SOURCES_INSTRUCTION = '검색 결과의 출처가 있다면 문서 하단에 참고 자료로 링크를 포함해주세요.'


def build_question_section(user_question: str) -> str:
    """Return the additional-question section, or '' for a blank question."""
    if not user_question or not user_question.strip():
        return ''
    return f'\n\n사용자의 추가 질문:\n"{user_question}"'


def build_selection_block(ctx: AIRequestContext) -> str:
    """Delimited block with the quoted selection, its context and the question."""
    return (
        '---\n'
        '선택된 텍스트:\n'
        f'"{ctx.selected_text}"\n'
        '\n'
        '주변 맥락:\n'
        f'{ctx.surrounding_context}{build_question_section(ctx.user_question)}\n'
        '---'
    )


def build_prompt(ctx: AIRequestContext, system_prompt: str) -> str:
    """
    Build the knowledge expansion prompt.

    Args:
        ctx: Selection, surrounding context and optional user question
        system_prompt: Instruction text configured by the user

    Returns:
        Prompt text sent as the single user message
    """
    return f'{system_prompt}\n\n{TITLE_INSTRUCTION}\n\n{build_selection_block(ctx)}'


def build_web_search_prompt(ctx: AIRequestContext) -> str:
    """
    Build the web search prompt.

    The configured system prompt is not used here; the template carries its
    own length, heading and sources instructions.
    """
    return '\n\n'.join([
        WEB_SEARCH_INSTRUCTION,
        TITLE_INSTRUCTION,
        WEB_SEARCH_FORMAT_INSTRUCTION,
        WEB_SEARCH_SOURCES_INSTRUCTION,
        build_selection_block(ctx),
    ])
