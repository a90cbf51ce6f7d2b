"""Edit-distance based string similarity."""

from rapidfuzz.distance import Levenshtein


def similarity(first: str, second: str) -> float:
    """
    Return a similarity ratio between 0.0 and 1.0 for two strings.

    Comparison is case-insensitive. Either string being empty scores 0.0;
    otherwise the score is ``(L - distance) / L`` where ``L`` is the longer
    length and ``distance`` is the classic Levenshtein distance (unit cost
    insert, delete and substitute).
    """
    if not first or not second:
        return 0.0

    a = first.upper()
    b = second.upper()
    if a == b:
        return 1.0

    longest = max(len(a), len(b))
    distance = Levenshtein.distance(a, b)
    return (longest - distance) / longest
