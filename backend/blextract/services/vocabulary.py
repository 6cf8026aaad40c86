"""
Fixed vocabularies used by the field rules: carrier prefixes, country
aliases, port aliases and packaging synonyms.
"""

import re
from typing import Optional

# Shipping-line prefixes that also open their BL numbers
CARRIER_PREFIXES = (
    "MEDU", "MAEU", "CMAU", "HLCU", "MSCU", "COSU",
    "EGLV", "OOLU", "MSKU", "SEGU", "ZIMU",
)

# Canonical country -> spellings seen in shipper addresses (EN/FR)
COUNTRY_ALIASES = {
    "CHINA": [r"P\.?\s*R\.?\s*CHINA", r"CHINA", r"CHINE"],
    "INDIA": [r"INDIA", r"INDE"],
    "TURKEY": [r"TURKEY", r"TURKIYE", r"TÜRKIYE", r"TURQUIE"],
    "NETHERLANDS": [r"NETHERLANDS", r"HOLLAND", r"PAYS[\s-]BAS"],
    "BELGIUM": [r"BELGIUM", r"BELGIQUE"],
    "FRANCE": [r"FRANCE"],
    "USA": [r"U\.S\.A\.?", r"USA", r"UNITED\s+STATES", r"[EÉ]TATS[\s-]UNIS"],
    "BRAZIL": [r"BRAZIL", r"BR[EÉ]SIL"],
    "THAILAND": [r"THAILAND", r"THA[IÏ]LANDE"],
    "VIETNAM": [r"VIET\s*NAM"],
    "INDONESIA": [r"INDONESIA", r"INDON[EÉ]SIE"],
    "PAKISTAN": [r"PAKISTAN"],
    "UAE": [r"U\.A\.E\.?", r"UAE", r"UNITED\s+ARAB\s+EMIRATES", r"[EÉ]MIRATS\s+ARABES\s+UNIS"],
    "SPAIN": [r"SPAIN", r"ESPAGNE"],
    "ITALY": [r"ITALY", r"ITALIE"],
    "GERMANY": [r"GERMANY", r"ALLEMAGNE"],
    "UK": [r"U\.K\.?", r"UK", r"UNITED\s+KINGDOM", r"ROYAUME[\s-]UNI"],
    "JAPAN": [r"JAPAN", r"JAPON"],
    "KOREA": [r"KOREA", r"COR[EÉ]E"],
    "MOROCCO": [r"MOROCCO", r"MAROC"],
    "SENEGAL": [r"S[EÉ]N[EÉ]GAL"],
    "COTE D'IVOIRE": [r"C[OÔ]TE\s*D.?IVOIRE", r"IVORY\s+COAST"],
    "SOUTH AFRICA": [r"SOUTH\s+AFRICA", r"AFRIQUE\s+DU\s+SUD"],
}

# Canonical port -> substrings that identify it, including the UN/LOCODE
PORT_ALIASES = {
    "CONAKRY": ["CONAK", "KONAKR", "GNCKY"],
}

PACKAGING_LABELS = {
    "BAG": "Sac", "BAGS": "Sac", "SAC": "Sac", "SACS": "Sac",
    "CARTON": "Carton", "CARTONS": "Carton", "CTN": "Carton", "CTNS": "Carton",
    "PALLET": "Palette", "PALLETS": "Palette", "PALETTE": "Palette", "PALETTES": "Palette",
    "BALE": "Balle", "BALES": "Balle", "BALLE": "Balle", "BALLES": "Balle",
    "DRUM": "Fût", "DRUMS": "Fût", "FUT": "Fût", "FUTS": "Fût", "FÛT": "Fût", "FÛTS": "Fût",
    "ROLL": "Rouleau", "ROLLS": "Rouleau", "ROULEAU": "Rouleau", "ROULEAUX": "Rouleau",
    "PIECE": "Pièce", "PIECES": "Pièce", "PIÈCE": "Pièce", "PIÈCES": "Pièce",
    "BUNDLE": "Lot", "BUNDLES": "Lot", "LOT": "Lot", "LOTS": "Lot",
}

# Unit words accepted after a count, longest spellings first
PACKAGING_WORDS = (
    r"BAGS?|SACS?|CARTONS?|CTNS?|PALLETS?|PALETTES?|BALES?|BALLES?|DRUMS?|F[ÛU]TS?"
    r"|ROLLS?|ROULEAUX|ROULEAU|PI[ÈE]CES?|BUNDLES?|LOTS?"
)

_COUNTRY_NAMES = list(COUNTRY_ALIASES)
_COUNTRY_PATTERN = re.compile(
    r"(?<![A-Z])(?:"
    + "|".join(f"(?P<c{i}>{'|'.join(aliases)})" for i, aliases in enumerate(COUNTRY_ALIASES.values()))
    + r")(?![A-Z])",
    re.IGNORECASE,
)


def find_country(block: str) -> str:
    """Canonical name of the first country mentioned in `block`, or ""."""
    match = _COUNTRY_PATTERN.search(block or "")
    if not match:
        return ""
    return _COUNTRY_NAMES[int(match.lastgroup[1:])]


def canonical_port(port: str) -> str:
    upper = port.upper()
    for canonical, aliases in PORT_ALIASES.items():
        if any(alias in upper for alias in aliases):
            return canonical
    return port


def packaging_label(word: str) -> str:
    """Map a unit word to its packaging family label; unknown words pass through."""
    return PACKAGING_LABELS.get(word.upper(), word)


def carrier_prefix(bl_number: str) -> Optional[str]:
    """The 4-letter prefix of a BL number, when it has one."""
    prefix = (bl_number or "")[:4].upper()
    return prefix if re.fullmatch(r"[A-Z]{4}", prefix) else None
