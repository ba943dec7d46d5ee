"""Определение языка сообщения об ошибке (fr/en)."""

import re
from typing import Literal

Language = Literal["fr", "en"]

# Диакритика французского алфавита
_FRENCH_DIACRITICS = re.compile(r"[àâäçéèêëîïôöùûüÿœæ]", re.IGNORECASE)

_FRENCH_STOPWORDS = frozenset(
    {"le", "la", "les", "une", "pas", "de", "des", "pour", "avec", "et", "sur"}
)
_WORD = re.compile(r"[^\W\d_]+", re.UNICODE)

# Сколько разных стоп-слов должно встретиться, чтобы считать текст французским
_STOPWORD_THRESHOLD = 2


def _locale_language(locale: str) -> Language:
    return "fr" if locale.strip().lower().startswith("fr") else "en"


def detect_language(sample: str | None, fallback_locale: str) -> Language:
    """Определить язык текста.

    Локаль клиента на fr даёт французский по умолчанию. Текст с
    французской диакритикой или с несколькими французскими стоп-словами
    переопределяет результат на французский.

    Args:
        sample: Текст сообщения (может отсутствовать)
        fallback_locale: Локаль клиента, например "fr-FR"

    Returns:
        "fr" или "en"
    """
    if _locale_language(fallback_locale) == "fr":
        return "fr"

    text = sample or ""
    if _FRENCH_DIACRITICS.search(text):
        return "fr"

    words = {word.lower() for word in _WORD.findall(text)}
    if len(words & _FRENCH_STOPWORDS) > _STOPWORD_THRESHOLD:
        return "fr"
    return "en"
