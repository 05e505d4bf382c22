"""Supported script languages."""

from typing import Dict, FrozenSet, Optional

from scriptrunner.core.errors import SettingsError
from scriptrunner.core.language import LanguageDescriptor
from scriptrunner.logging import get_logger

from .kotlin import KOTLIN, KOTLIN_KEYWORDS
from .swift import SWIFT, SWIFT_KEYWORDS

logger = get_logger(__name__)

BUILTIN_LANGUAGES: Dict[str, LanguageDescriptor] = {
	SWIFT.id: SWIFT,
	KOTLIN.id: KOTLIN,
}

KEYWORDS: Dict[str, FrozenSet[str]] = {
	SWIFT.id: SWIFT_KEYWORDS,
	KOTLIN.id: KOTLIN_KEYWORDS,
}

DEFAULT_LANGUAGE_ID = SWIFT.id


def available_languages() -> Dict[str, LanguageDescriptor]:
	"""Built-in languages plus the ones declared in settings.

	User entries cannot replace a built-in id. An invalid ``languages``
	setting is logged and skipped.
	"""
	from scriptrunner.core.settings import load_user_languages

	languages = dict(BUILTIN_LANGUAGES)
	try:
		user_languages = load_user_languages()
	except SettingsError as e:
		logger.warning(f"{e}; using built-in languages only")
		return languages

	for language in user_languages:
		if language.id in languages:
			logger.warning(f"User language '{language.id}' shadows a built-in, ignored")
			continue
		languages[language.id] = language
	return languages


def known_extensions() -> FrozenSet[str]:
	"""Source extensions recognized in diagnostic lines."""
	return frozenset(lang.extension for lang in available_languages().values())


def language_for_path(path: str) -> Optional[LanguageDescriptor]:
	"""Pick the language whose extension matches ``path``."""
	for language in available_languages().values():
		if path.endswith(f".{language.extension}"):
			return language
	return None


def keywords_for(language_id: str) -> FrozenSet[str]:
	return KEYWORDS.get(language_id, frozenset())


__all__ = [
	"BUILTIN_LANGUAGES",
	"DEFAULT_LANGUAGE_ID",
	"KEYWORDS",
	"KOTLIN",
	"SWIFT",
	"available_languages",
	"keywords_for",
	"known_extensions",
	"language_for_path",
]
