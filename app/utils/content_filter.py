"""Basic inappropriate content filter for user-written reviews."""

import re

# Profanity (English/Spanish), offensive terms and spam phrases
INAPPROPRIATE_WORDS = (
    "fuck",
    "shit",
    "damn",
    "bitch",
    "asshole",
    "bastard",
    "puto",
    "puta",
    "mierda",
    "pendejo",
    "cabrón",
    "chingar",
    "verga",
    "coño",
    "idiot",
    "stupid",
    "moron",
    "idiota",
    "estúpido",
    "click here",
    "buy now",
    "visit",
    "http://",
    "https://",
    "www.",
)

_WORD_PATTERNS = {
    # \b only anchors on word characters, so URL fragments match as plain substrings
    word: re.compile(
        (r"\b" if word[0].isalnum() else "")
        + re.escape(word)
        + (r"\b" if word[-1].isalnum() else ""),
        re.IGNORECASE,
    )
    for word in INAPPROPRIATE_WORDS
}

_REPEATED_PUNCTUATION = re.compile(r"[!?]{2,}")


def get_inappropriate_words(content: str) -> list[str]:
    """Return the listed words and phrases found in the content."""
    if not content:
        return []
    return [word for word, pattern in _WORD_PATTERNS.items() if pattern.search(content)]


def contains_inappropriate_content(content: str) -> bool:
    """Check content for listed words, shouting or punctuation spam.

    Args:
        content: Text to check

    Returns:
        bool: True if the content should be held for moderation
    """
    if not content:
        return False

    if get_inappropriate_words(content):
        return True

    capitals = sum(1 for char in content if "A" <= char <= "Z")
    if len(content) > 20 and capitals / len(content) > 0.5:
        return True

    punctuation_runs = len(_REPEATED_PUNCTUATION.findall(content))
    if punctuation_runs / len(content) > 0.1:
        return True

    return False
