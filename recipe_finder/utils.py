from typing import List


def primary_ingredient(query: str) -> str:
    """First ingredient of a comma separated query: 'chicken, rice' -> 'chicken'"""
    return query.split(",", 1)[0].strip()


def split_ingredients(text: str) -> List[str]:
    """Split user text on commas into trimmed, lower-cased tokens.

    Empty tokens are kept so callers see exactly what was typed; the
    ingredient matcher never matches them.
    """
    if not text:
        return []
    return [part.strip().lower() for part in text.split(",")]
