"""
Pattern cascades for every scalar Bill of Lading field.

Each list is ordered most specific first: label-anchored and carrier-specific
forms before generic fallbacks, so that a stray run of digits does not win
over a labelled value. All patterns are case-insensitive and accept the
English and French labels found on BLs from the major shipping lines.
"""

import re

from blextract.services.cascade import Rule
from blextract.services.vocabulary import (
    CARRIER_PREFIXES,
    PACKAGING_WORDS,
    canonical_port,
    find_country,
    packaging_label,
)
from blextract.utils.numeric import parse_count, parse_numeric
from blextract.utils.text import clean_description, clean_field, split_block

# Place name on the rest of the line, stopping at a wide gap or the next label
_PLACE = (
    r"([A-Z][A-Z \t,'.\-]{2,40}?)"
    r"(?=[ \t]{2,}|[ \t]*(?:\r?\n|$)|\s+(?:PORT|POD|POL|PLACE|VESSEL|VOYAGE)\b)"
)
# Bounded so long digit runs cannot make the lazy match quadratic
_WEIGHT = r"(\d[\d,. ]{0,20}?)\s*(?:KGS?|KILOS?|MT|TONS?)\b"
# Twelve digits at most; longer digit runs are not package counts
_COUNT = r"(\d{1,3}(?:[,.]\d{3}){1,4}|\d{1,12})(?!\d|[,.]\d)"
_AMOUNT = r"(\d[\d,.]{0,20})"
_CURRENCIES = r"USD|EUR|GBP|XOF|GNF|CNY"


def _upper(value: str) -> str:
    return value.strip().upper()


def _amount(value: str) -> float:
    return parse_numeric(value.rstrip(".,"))


def _block(m: re.Match) -> tuple:
    return split_block(m.group(1))


def _shipper(m: re.Match) -> tuple:
    name, _ = split_block(m.group(1))
    return name, find_country(m.group(1))


BL_NUMBER_RULES = [
    Rule.group(r"\bB[/.]?L[\s.:]*(?:NO|NUMBER|N°|#)?[\s.:]*([A-Z]{4}\d{7,10})\b", convert=_upper),
    Rule.group(r"\bBILL\s*OF\s*LADING[\s.:]*(?:NO|NUMBER|N°)?[\s.:]*((?=[A-Z]*\d)[A-Z0-9]{8,15})\b", convert=_upper),
    Rule.group(r"\b(?:" + "|".join(CARRIER_PREFIXES) + r")\d{7,10}\b", convert=_upper),
    Rule.group(r"\b(?:BL|B/L|BOL)\s*[:#]?\s*((?=[A-Z]*\d)[A-Z0-9]{6,15})\b", convert=_upper),
]

_VESSEL_LABEL = r"\b(?:OCEAN\s+VESSEL|VESSEL(?:\s+NAME)?|NAVIRE|SHIP'?S?\s+NAME|M/V|MV)\b[\s:.]*"

VESSEL_RULES = [
    # Vessel immediately followed by its voyage ("MSC AURORA V. 245N")
    Rule.group(
        _VESSEL_LABEL + r"([A-Z][A-Z \t\-.]{2,30}?)\s+(?:V\.?|VOY(?:AGE)?\.?)\s*(?:NO\.?)?\s*[:#]?\s*[A-Z]?\d",
        convert=clean_field,
    ),
    Rule.group(_VESSEL_LABEL + r"([A-Z][A-Z \t\-.]{2,30})", convert=clean_field),
]

VOYAGE_RULES = [
    Rule.group(r"\bVOY(?:AGE)?\.?\s*(?:NO\.?|N°|#)?\s*[:.]?\s*([A-Z]?\d{2,6}[A-Z]?)\b", convert=_upper),
    Rule.group(r"\bV\.\s*(\d{2,6}[A-Z]?)\b", convert=_upper),
]

PORT_OF_LOADING_RULES = [
    Rule.group(
        r"\b(?:PORT\s+OF\s+LOADING|POL|LIEU\s+DE\s+CHARGEMENT|PORT\s+DE\s+CHARGEMENT)\b[\s:.]*" + _PLACE,
        convert=clean_field,
    ),
    Rule.group(r"\b(?:LOADED|SHIPPED)\s+ON\s+BOARD\b[\s:.]*AT\s+" + _PLACE, convert=clean_field),
]

PORT_OF_DISCHARGE_RULES = [
    Rule.group(
        r"\b(?:PORT\s+OF\s+DISCHARGE|POD|LIEU\s+DE\s+D[ÉE]CHARGEMENT|PORT\s+DE\s+D[ÉE]CHARGEMENT"
        r"|PORT\s+OF\s+DESTINATION)\b[\s:.]*" + _PLACE,
        convert=lambda s: canonical_port(clean_field(s)),
    ),
    Rule.group(
        r"\b(?:DISCHARGE|DESTINATION)\b[\s:.]*" + _PLACE,
        convert=lambda s: canonical_port(clean_field(s)),
    ),
]

CONSIGNEE_RULES = [
    Rule(
        re.compile(
            r"\b(?:CONSIGNEE|DESTINATAIRE|NOTIFY\s+PARTY)\b[\s:.]*([\s\S]{5,120}?)"
            r"(?=\n\s*(?:NOTIFY|PORT|VESSEL|NAVIRE|LIEU|GOODS|DESCRIPTION|CONTAINER|MARKS)\b)",
            re.IGNORECASE,
        ),
        _block,
    ),
]

SHIPPER_RULES = [
    Rule(
        re.compile(
            r"\b(?:SHIPPER|EXP[ÉE]DITEUR|CHARGEUR)\b(?:\s*/\s*EXPORTER)?[\s:.]*([\s\S]{5,120}?)"
            r"(?=\n\s*(?:CONSIGNEE|DESTINATAIRE|NOTIFY)\b)",
            re.IGNORECASE,
        ),
        _shipper,
    ),
]

DESCRIPTION_RULES = [
    Rule.group(
        r"\b(?:DESCRIPTION\s+OF\s+(?:GOODS|PACKAGES|CARGO)(?:\s+AND\s+GOODS)?"
        r"|NATURE\s+(?:OF|DES)\s+(?:GOODS|MARCHANDISES)|D[ÉE]SIGNATION\s+DES\s+MARCHANDISES)"
        r"[\s:.]*([\s\S]{10,300}?)(?=\n\s*(?:GROSS|WEIGHT|FREIGHT|CONTAINER|TOTAL|SHIPPED|POIDS)\b)",
        convert=clean_description,
    ),
    Rule.group(r"\b(?:SAID\s+TO\s+CONTAIN|STC)\b[\s:.]*([\s\S]{5,200}?)(?=\n|$)", convert=clean_description),
]

HS_CODE_RULES = [
    Rule.group(
        r"\b(?:H\.?S\.?(?:\s*CODE)?|CODE\s+SH|HARMONI[SZ]ED(?:\s+(?:SYSTEM|CODE))*|TARIFF(?:\s+CODE)?)"
        r"[\s:.#]*(\d{4}(?:[. ]?\d{2}){1,3})(?!\d)",
    ),
    Rule.group(r"\b(\d{4}\.\d{2}\.\d{2})\b"),
    Rule.group(r"\b(\d{4}\.\d{2})\b"),
]

GROSS_WEIGHT_RULES = [
    Rule.group(
        r"(?:\bGROSS\s+WEIGHT|\bPOIDS\s+BRUT|\bG\.W\.|\bGW\b)(?:\s*\(KGS?\))?[\s:.]*" + _WEIGHT,
        convert=parse_numeric,
    ),
    Rule.group(r"(\d[\d,. ]{0,20}?)\s*KGS?\s*(?:GROSS|BRUT)\b", convert=parse_numeric),
    Rule.group(r"\bWEIGHT\b[\s:.]*(\d[\d,. ]{0,20}?)\s*KGS?\b", convert=parse_numeric),
]

NET_WEIGHT_RULES = [
    Rule.group(
        r"(?:\bNET\s+WEIGHT|\bPOIDS\s+NET|\bN\.W\.|\bNW\b)(?:\s*\(KGS?\))?[\s:.]*" + _WEIGHT,
        convert=parse_numeric,
    ),
]

PACKAGE_COUNT_RULES = [
    Rule.group(
        r"(?:\bNO\.?\s+OF\s+(?:PACKAGES|PKGS|COLIS)|\bNOMBRE\s+(?:DE\s+)?COLIS|\bPACKAGES?\b|\bPKGS\b)[\s:.]*" + _COUNT,
        convert=parse_count,
    ),
    Rule.group(r"\bTOTAL\b[\s:.]*" + _COUNT + r"\s*(?:BAGS|SACS|CTNS|CARTONS|PACKAGES|PKGS|COLIS)\b", convert=parse_count),
    Rule.group(r"(?<![\d,.])" + _COUNT + r"\s*(?:" + PACKAGING_WORDS + r"|PACKAGES|PKGS|COLIS)\b", convert=parse_count),
]

PACKAGING_RULES = [
    Rule.group(r"\d\s*(" + PACKAGING_WORDS + r")\b", convert=packaging_label),
]

CIF_VALUE_RULES = [
    # Currency code before or after the amount ("USD 25,000.50", "25.000,50 EUR")
    Rule(
        re.compile(
            r"\b(?:DECLARED\s+VALUE|VALUE\s+OF\s+GOODS|CIF(?:\s+VALUE)?|VALEUR(?:\s+CAF|\s+CIF|\s+D[ÉE]CLAR[ÉE]E)?)\b"
            r"[\s:.]*(?:([A-Z]{3})\s*)?" + _AMOUNT + r"(?:[ \t]*(" + _CURRENCIES + r")\b)?",
            re.IGNORECASE,
        ),
        lambda m: (_amount(m.group(2)), m.group(1) or m.group(3)),
    ),
    Rule(re.compile(r"\b(" + _CURRENCIES + r")[\s:.]*" + _AMOUNT, re.IGNORECASE), lambda m: (_amount(m.group(2)), m.group(1))),
    Rule(re.compile(_AMOUNT + r"\s*(" + _CURRENCIES + r")\b", re.IGNORECASE), lambda m: (_amount(m.group(1)), m.group(2))),
]
