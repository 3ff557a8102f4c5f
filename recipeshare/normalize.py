# No fuzzy matching: tags compare equal after trimming and case folding


def normalize_tag(s: str) -> str:
    if not s:
        return ""
    return s.strip().casefold()


def is_tag_match(tags, wanted: str) -> bool:
    """Return True if any of ``tags`` equals ``wanted`` once normalized.

    This intentionally avoids substring or fuzzy matching: "Wat" does not
    match a "Doro Wat" tag.
    """
    w = normalize_tag(wanted)
    if not w:
        return False
    return any(normalize_tag(t) == w for t in tags)


def contains_text(haystack: str, needle: str) -> bool:
    if not haystack or not needle:
        return False
    return normalize_tag(needle) in haystack.casefold()
