"""
String similarity based on Levenshtein edit distance.

Both functions are case-sensitive and do no normalization; callers decide
whether to lower-case or strip their inputs first.
"""


def levenshtein_distance(a: str, b: str) -> int:
    """
    Minimum number of single-character insertions, deletions or
    substitutions needed to turn ``a`` into ``b``.

    Uses two rolling rows sized to the shorter string, so memory is
    O(min(len(a), len(b))).
    """
    if len(a) < len(b):
        a, b = b, a

    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(
                current[j - 1] + 1,  # insertion
                previous[j] + 1,  # deletion
                previous[j - 1] + cost,  # substitution
            )
        previous = current

    return previous[len(b)]


def similarity(a: str, b: str) -> float:
    """
    Normalized similarity in [0.0, 1.0], where 1.0 means identical.

    Defined as ``(max_len - distance) / max_len``; two empty strings are
    identical.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0

    return (longest - levenshtein_distance(a, b)) / longest
