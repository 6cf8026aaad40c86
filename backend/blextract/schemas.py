from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AcquisitionMethod(str, Enum):
    """Which path produced the transcript handed to field extraction."""

    NATIVE_TEXT = "native-text"
    OCR = "ocr"
    FAILED = "failed"


class ContainerType(str, Enum):
    DRY_20 = "DRY_20"
    DRY_40 = "DRY_40"
    DRY_40HC = "DRY_40HC"
    REEFER_20 = "REEFER_20"
    REEFER_40 = "REEFER_40"
    REEFER_40HR = "REEFER_40HR"


class _Frozen(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class ContainerRecord(_Frozen):
    """
    One physical container referenced by the Bill of Lading.

    Per-container weight and package count are not recoverable from free
    text and stay at zero for the operator to fill in.
    """
    number: str = Field(..., pattern=r"^[A-Z]{4}\d{7}$", description="ISO 6346 container number.")
    type: ContainerType = ContainerType.DRY_40HC
    seal_number: str = ""
    gross_weight: float = Field(0.0, ge=0)
    package_count: int = Field(0, ge=0)


class ExtractedBLData(_Frozen):
    """
    Shipment fields pre-filled from a Bill of Lading transcript.

    Every field has a default so the record is always complete, even when
    nothing could be read from the document.
    """
    bl_number: str = Field("", description="Bill of Lading number, e.g. MEDU1234567.")
    vessel_name: str = ""
    voyage_number: str = ""
    port_of_loading: str = ""
    port_of_discharge: str = ""

    client_name: str = Field("", description="Consignee name (first line of the consignee block).")
    client_address: str = Field("", description="Remaining consignee lines, comma separated.")
    supplier_name: str = Field("", description="Shipper name (first line of the shipper block).")
    supplier_country: str = ""

    description: str = ""
    hs_code: str = ""
    packaging: str = Field("", description="Canonical packaging label, e.g. Sac, Carton, Palette.")
    package_count: int = Field(0, ge=0)
    gross_weight: float = Field(0.0, ge=0)
    net_weight: float = Field(0.0, ge=0)

    cif_value: float = Field(0.0, ge=0)
    cif_currency: str = Field("USD", pattern=r"^[A-Z]{3}$")

    containers: List[ContainerRecord] = Field(default_factory=list)


class ExtractionResult(_Frozen):
    """
    Full response sent to the calling layer.
    """
    data: ExtractedBLData = Field(default_factory=ExtractedBLData)
    raw_text: str = Field("", description="Full transcript, shown to the operator for manual correction.")
    method: AcquisitionMethod = AcquisitionMethod.FAILED
