"""
Field Extraction Engine.

Turns a plain-text BL transcript into ExtractedBLData. Extraction is a pure
function of the transcript: no I/O, and every field the rules cannot find
keeps its default value.
"""

import re

from blextract.core.config import settings
from blextract.schemas import ContainerType, ExtractedBLData
from blextract.services import rules
from blextract.services.cascade import first_match
from blextract.services.containers import extract_containers


def _currency(raw, default: str) -> str:
    code = (raw or "").strip().upper()
    return code if re.fullmatch(r"[A-Z]{3}", code) else default


def empty_bl_data() -> ExtractedBLData:
    """All-defaults record, returned when nothing could be read."""
    return ExtractedBLData(cif_currency=settings.DEFAULT_CURRENCY)


def extract(transcript: str) -> ExtractedBLData:
    """
    Extract shipment fields from a BL transcript.

    Args:
        transcript: Text obtained by native extraction or OCR. May be empty.

    Returns:
        ExtractedBLData: Fully populated record; missing fields use defaults.
    """
    text = transcript or ""

    bl_number = first_match(text, rules.BL_NUMBER_RULES, "")
    client_name, client_address = first_match(text, rules.CONSIGNEE_RULES, ("", ""))
    supplier_name, supplier_country = first_match(text, rules.SHIPPER_RULES, ("", ""))
    cif_value, currency = first_match(text, rules.CIF_VALUE_RULES, (0.0, None))

    return ExtractedBLData(
        bl_number=bl_number,
        vessel_name=first_match(text, rules.VESSEL_RULES, ""),
        voyage_number=first_match(text, rules.VOYAGE_RULES, ""),
        port_of_loading=first_match(text, rules.PORT_OF_LOADING_RULES, ""),
        port_of_discharge=first_match(text, rules.PORT_OF_DISCHARGE_RULES, ""),
        client_name=client_name,
        client_address=client_address,
        supplier_name=supplier_name,
        supplier_country=supplier_country,
        description=first_match(text, rules.DESCRIPTION_RULES, ""),
        hs_code=first_match(text, rules.HS_CODE_RULES, ""),
        packaging=first_match(text, rules.PACKAGING_RULES, ""),
        package_count=first_match(text, rules.PACKAGE_COUNT_RULES, 0),
        gross_weight=first_match(text, rules.GROSS_WEIGHT_RULES, 0.0),
        net_weight=first_match(text, rules.NET_WEIGHT_RULES, 0.0),
        cif_value=cif_value,
        cif_currency=_currency(currency, settings.DEFAULT_CURRENCY),
        containers=extract_containers(
            text,
            bl_number=bl_number,
            default_type=ContainerType(settings.DEFAULT_CONTAINER_TYPE),
        ),
    )
