"""Levenshtein edit distance."""


def edit_distance(a: str, b: str) -> int:
    """
    Minimum number of single-character insertions, deletions or substitutions
    turning ``a`` into ``b``.

    Operates on code points; Hangul syllables are single code points so a
    changed syllable costs one edit.

    Args:
        a: First string
        b: Second string

    Returns:
        Edit distance (>= 0)
    """
    rows = len(a) + 1
    cols = len(b) + 1

    # table[i][j] is the distance between a[:i] and b[:j]
    table = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,  # deletion
                table[i][j - 1] + 1,  # insertion
                table[i - 1][j - 1] + cost,  # substitution
            )

    return table[-1][-1]
