def is_subsequence(needle: str, haystack: str) -> bool:
    """True if the characters of needle appear in haystack in order,
    ignoring case. An empty needle matches everything."""
    if not needle:
        return True
    chars = iter(haystack.lower())
    return all(ch in chars for ch in needle.lower())
