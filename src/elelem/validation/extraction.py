"""
Extraction of the last JSON object embedded in free-form model text.
"""


def extract_last_json(text: str) -> str | None:
    """
    Return the last top-level balanced ``{...}`` block in ``text``.

    Scans backwards: the first ``}`` seen marks the end, each ``}`` raises the
    depth and each ``{`` lowers it, and the block starts where the depth gets
    back to zero. Only brace nesting is tracked, so prose, markdown fences,
    several JSON blobs and braces inside string values are all handled.
    Malformed JSON inside the block is left for the parse step.

    Args:
        text: Raw model response

    Returns:
        The substring from the opening to the closing brace (inclusive),
        or None if no balanced block exists.

    Examples:
        >>> extract_last_json('{"a":1}{"b":2}')
        '{"b":2}'
        >>> extract_last_json('no json here') is None
        True
    """
    depth = 0
    end = -1
    start = -1

    for i in range(len(text) - 1, -1, -1):
        char = text[i]
        if char == "}":
            if end == -1:
                end = i
            depth += 1
        elif char == "{":
            depth -= 1
            if depth == 0:
                start = i
                break

    if start != -1 and end != -1:
        return text[start:end + 1]

    return None
