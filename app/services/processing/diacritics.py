"""
Repair of Romanian diacritics mangled by double UTF-8 / cp1252 decoding.
Longer sequences come first so a partial match never pre-empts a full one.
"""

REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("Ã£Æ'Â¢", "â"),
    ("Ã£Æ'â€ž", "ă"),
    ("Ã£Æ'Ë†", "î"),
    ("Ã£Æ'Åž", "ș"),
    ("Ã£Æ'Å¢", "ț"),
    ("Ã£Æ'Ëœ", "Ș"),
    ("Ã£Æ'Å£", "Ț"),
    ("â€žÆ'", "ă"),
    ("Ã¢", "â"),
    ("Â¢", ""),
    ("â€œ", '"'),
    ("ÅŸ", "ș"),
    ("Å£", "ț"),
    ("Äƒ", "ă"),
    ("Ã®", "î"),
    ("Ã£", "ă"),
    ("Ä‚", "Ă"),
    ("È™", "ș"),
    ("È›", "ț"),
    ("Ä°", "İ"),
    ("Åž", "Ș"),
    ("Å¢", "Ț"),
)


def fix_diacritics(text: str) -> str:
    for bad, good in REPLACEMENTS:
        text = text.replace(bad, good)
    return text
