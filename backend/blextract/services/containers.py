"""
Container list extraction.

Container numbers, seal numbers and container types are scanned
independently and then paired by position: the i-th number gets the i-th
seal and the i-th type. This assumes the document lists them in the same
order, which holds for the common tabular BL layouts but is not guaranteed.
"""

import re
from typing import List, Optional

from blextract.core.config import settings
from blextract.schemas import ContainerRecord, ContainerType
from blextract.services.cascade import find_all
from blextract.services.vocabulary import carrier_prefix

# ISO 6346 shape: owner code + category letter, then serial and check digit
CONTAINER_NUMBER = re.compile(r"\b([A-Z]{4}[0-9]{7})\b")

SEAL_NUMBER = re.compile(
    r"\b(?:SEALS?|SCELL[ÉE]S?|PLOMBS?)(?:\s*(?:NO|NUMBER|N°|#)\.?)?\s*[:#]?\s*((?=[A-Z]*\d)[A-Z0-9]{4,15})\b",
    re.IGNORECASE,
)

CONTAINER_TYPE = re.compile(
    r"(?<!\d)((?:20|40)\s*'?\s*(?:GP|DV|STD|DRY|HC|HQ|HR|RF|RE|REEFER|HIGH\s*CUBE))\b",
    re.IGNORECASE,
)


def normalize_container_type(raw: str) -> ContainerType:
    """Map a size/qualifier mention such as "40' HC" or "20RF" to a ContainerType."""
    s = re.sub(r"[\s']+", "", raw.upper())
    if s.startswith("40"):
        if re.search(r"HC|HQ|HIGH", s):
            return ContainerType.DRY_40HC
        if re.search(r"RF|RE", s):
            return ContainerType.REEFER_40
        if "HR" in s:
            return ContainerType.REEFER_40HR
        return ContainerType.DRY_40
    if s.startswith("20"):
        if re.search(r"RF|RE", s):
            return ContainerType.REEFER_20
        return ContainerType.DRY_20
    return ContainerType(settings.DEFAULT_CONTAINER_TYPE)


def container_numbers(text: str, bl_number: str = "") -> List[str]:
    """
    Unique container numbers in order of first appearance.

    Numbers opening with the BL number's own carrier prefix are skipped, since
    the BL identifier usually has the same 4-letters-7-digits shape.
    """
    excluded = carrier_prefix(bl_number)
    numbers = []
    for number in find_all(text, CONTAINER_NUMBER):
        if number in numbers:
            continue
        if excluded and number.startswith(excluded):
            continue
        numbers.append(number)
    return numbers


def seal_numbers(text: str) -> List[str]:
    return find_all(text, SEAL_NUMBER, str.upper)


def container_types(text: str) -> List[ContainerType]:
    return find_all(text, CONTAINER_TYPE, normalize_container_type)


def _type_at(types: List[ContainerType], index: int, default: ContainerType) -> ContainerType:
    # Shortfall: first type seen anywhere, then the configured default
    if index < len(types):
        return types[index]
    return types[0] if types else default


def extract_containers(text: str, bl_number: str = "", default_type: Optional[ContainerType] = None) -> List[ContainerRecord]:
    """
    Build the container list for a transcript.

    Args:
        text: Full transcript.
        bl_number: Already extracted BL number, used to filter out its prefix.
        default_type: Type used when no type is mentioned at all.

    Returns:
        List[ContainerRecord]: One record per unique container number. Weight
        and package count per container are left at 0.
    """
    default_type = default_type or ContainerType(settings.DEFAULT_CONTAINER_TYPE)
    numbers = container_numbers(text, bl_number)
    seals = seal_numbers(text)
    types = container_types(text)

    return [
        ContainerRecord(
            number=number,
            type=_type_at(types, i, default_type),
            seal_number=seals[i] if i < len(seals) else "",
        )
        for i, number in enumerate(numbers)
    ]
