"""Locale format conversion for the content graph."""


def to_graph_locale(locale: str) -> str:
    """Convert a URL-style locale to the content graph format.

    Examples:
        'en' -> 'en', 'fr-ca' -> 'fr_CA', 'zh-Hans-HK' -> 'zh_Hans_HK'

    The language is lower-cased, the region upper-cased and a script
    subtag keeps its case.
    """
    parts = locale.strip().replace("-", "_").split("_")

    if len(parts) == 2:
        return f"{parts[0].lower()}_{parts[1].upper()}"
    if len(parts) == 3:
        return f"{parts[0].lower()}_{parts[1]}_{parts[2].upper()}"
    return "_".join(parts).lower()
