"""
Core configuration service for Knowledge Expander.

This module provides the settings layer that:
- Defines the settings value object and its defaults
- Loads and saves settings from a JSON data file
- Provides consistent credential and model lookups per provider

The settings object is owned by the host. Services receive it explicitly
and are told about changes (AIRouter.update_settings) instead of reading
a global.
"""

import json
import logging
import re
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from .exceptions import ServiceNotConfigured

logger = logging.getLogger(__name__)

# Valid values for ExpanderSettings.ai_provider
PROVIDERS = ('openai', 'gemini', 'claude')

# Boundary before each capital of a camelCase key (aiProvider -> ai_provider)
CAMEL_CASE_BOUNDARY_RE = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')

DEFAULT_SYSTEM_PROMPT = (
    "이 내용을 파악하기 위해 알아야 하는 배경지식과 추가적인 정보를 자세히 설명해주세요. "
    "1000자 이내로 작성하고, md 파일의 마크다운 형태를 유지해주세요. "
    "기본적인 소제목은 '##'를 사용하고, 최대 '###'까지만 사용합니다."
)


@dataclass(frozen=True)
class ExpanderSettings:
    """
    User settings for providers, models and note output.

    template_path is stored for the host only: the host reads the template
    file and passes its text to KnowledgeNoteService.create_note.
    """
    ai_provider: str = 'openai'
    openai_api_key: str = ''
    openai_model: str = 'gpt-4o'
    openai_web_search_model: str = 'gpt-4o-mini'
    gemini_api_key: str = ''
    gemini_model: str = 'gemini-1.5-flash'
    claude_api_key: str = ''
    claude_model: str = 'claude-3-5-sonnet-20241022'
    note_path: str = ''
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    template_path: str = ''
    max_tags: int = 10


DEFAULT_SETTINGS = ExpanderSettings()


def settings_from_dict(data: Mapping[str, Any]) -> ExpanderSettings:
    """
    Build settings from a partial mapping, filling in defaults.

    Keys may be snake_case or the camelCase used by the editor plugin's data
    file (aiProvider, openaiApiKey, ...). Unknown keys are ignored (with a
    warning) so that data files written by newer versions still load.

    Args:
        data: Mapping of setting names to values

    Returns:
        ExpanderSettings instance

    Raises:
        ServiceNotConfigured: If ai_provider or max_tags is invalid
    """
    known = {f.name for f in fields(ExpanderSettings)}
    values = {}

    for key, value in data.items():
        key = _snake_case(key)
        if key not in known:
            logger.warning(f"Ignoring unknown setting '{key}'")
            continue
        values[key] = value

    settings = replace(DEFAULT_SETTINGS, **values)

    if settings.ai_provider not in PROVIDERS:
        raise ServiceNotConfigured(
            f"Unknown AI provider '{settings.ai_provider}', expected one of {', '.join(PROVIDERS)}"
        )
    if isinstance(settings.max_tags, bool) or not isinstance(settings.max_tags, int) or settings.max_tags < 1:
        raise ServiceNotConfigured(f"max_tags must be a positive integer, got {settings.max_tags!r}")

    return settings


def settings_to_dict(settings: ExpanderSettings) -> Dict[str, Any]:
    """Return the settings as a plain dict suitable for JSON."""
    return asdict(settings)


def load_settings(path: Union[str, Path]) -> ExpanderSettings:
    """
    Load settings from a JSON data file.

    A missing file yields the defaults.

    Args:
        path: Path of the data file

    Returns:
        ExpanderSettings instance

    Raises:
        ServiceNotConfigured: If the file is not a JSON object or holds invalid values
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No settings file at {path}, using defaults")
        return DEFAULT_SETTINGS

    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ServiceNotConfigured(f"Settings file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ServiceNotConfigured(f"Settings file {path} must contain a JSON object")

    return settings_from_dict(data)


def save_settings(path: Union[str, Path], settings: ExpanderSettings) -> None:
    """
    Write settings to a JSON data file.

    Args:
        path: Path of the data file (parent directories are created)
        settings: Settings to persist
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(settings_to_dict(settings), ensure_ascii=False, indent=2),
        encoding='utf-8'
    )
    logger.debug(f"Settings saved to {path}")


def get_api_key(settings: ExpanderSettings, provider: str) -> str:
    """
    Get the API key configured for a provider.

    Args:
        settings: Current settings
        provider: 'openai', 'gemini' or 'claude'

    Returns:
        The key, or '' if none is set
    """
    return getattr(settings, f"{_provider_name(provider)}_api_key") or ''


def get_model(settings: ExpanderSettings, provider: str) -> str:
    """Get the model id configured for a provider."""
    return getattr(settings, f"{_provider_name(provider)}_model") or ''


def is_provider_configured(settings: ExpanderSettings, provider: str) -> bool:
    """
    Check if a provider has a non-blank API key.

    Returns:
        True if the provider can be called, False otherwise
    """
    return bool(get_api_key(settings, provider).strip())


def _provider_name(provider: str) -> str:
    name = getattr(provider, 'value', provider)
    if name not in PROVIDERS:
        raise ServiceNotConfigured(f"Unknown AI provider: {name}")
    return name


def _snake_case(key: str) -> str:
    return CAMEL_CASE_BOUNDARY_RE.sub('_', key).lower()
