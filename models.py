"""
Data model for the voucher pipeline.

RawRecord is a read-only mapping produced by the tabular parser; everything
downstream of the mapper is a pydantic model so invariants (non-empty,
lower-cased handle; Decimal fare components) are enforced on construction.
"""
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

RawRecord = Mapping[str, Any]


def freeze_record(values: Dict[str, Any]) -> RawRecord:
    """Wrap a parsed row so mapping code cannot mutate it."""
    return MappingProxyType(dict(values))


class ServiceType(str, Enum):
    """Travel service handled by an upload. Values double as route and filename segments."""
    AIR = "air"
    HOTEL = "hotel"
    CAR = "carro"
    BUS = "onibus"


class SourceFormat(str, Enum):
    SPREADSHEET = "spreadsheet"
    DELIMITED = "delimited"


class FareBreakdown(BaseModel):
    """The three fare components rendered in the ``valores`` block."""
    model_config = ConfigDict(frozen=True)

    tarifa: Decimal = Decimal("0")
    taxa: Decimal = Decimal("0")
    taxa_du: Decimal = Decimal("0")


class VoucherHeader(BaseModel):
    """
    Fields shared by every service type.

    Attributes:
        handle: Business identifier of the source row, trimmed and lower-cased
        requisicao: Requisition id in the requesting system
        data_emissao: Issuance date
        forma_pagamento: Payment-method code (after lookup)
        moeda: ISO currency code
        fornecedor: Vendor/carrier code
    """
    model_config = ConfigDict(frozen=True)

    handle: str
    requisicao: str = ""
    data_emissao: date
    forma_pagamento: str = ""
    moeda: str = "BRL"
    fornecedor: str = ""
    num_bilhete: str = ""
    localizador: str = ""
    passageiro: str = ""
    matricula: str = ""
    emissor: str = ""
    cliente: str = ""
    centro_custo: str = ""
    solicitante: str = ""
    aprovador: str = ""
    departamento: str = ""
    motivo_viagem: str = ""

    @field_validator("handle")
    @classmethod
    def handle_must_be_normalized(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("handle must not be empty")
        return value


class AirItinerary(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["air"] = "air"
    origem: str = ""
    destino: str = ""
    data_embarque: date
    data_retorno: date
    classe: str = ""
    cia: str = ""


class HotelItinerary(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["hotel"] = "hotel"
    checkin: date
    checkout: date
    tipo_acomodacao: str = ""
    hotel: str = ""
    cidade: str = ""


class CarItinerary(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["carro"] = "carro"
    cidade_retirada: str = ""
    data_retirada: date
    cidade_devolucao: str = ""
    data_devolucao: date
    locadora: str = ""


class BusItinerary(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["onibus"] = "onibus"
    data_entrada: date
    cidade_origem: str = ""
    cidade_destino: str = ""


Itinerary = Union[AirItinerary, HotelItinerary, CarItinerary, BusItinerary]


class Voucher(BaseModel):
    """Canonical record for one reserved or consumed travel service."""
    model_config = ConfigDict(frozen=True)

    service_type: ServiceType
    header: VoucherHeader
    fare: FareBreakdown = FareBreakdown()
    itinerary: Itinerary = Field(discriminator="kind")

    @property
    def handle(self) -> str:
        return self.header.handle


class GeneratedDocument(BaseModel):
    """Encoded XML payload for one voucher plus its output filename."""
    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes
    encoding: str

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding)


class RowError(BaseModel):
    """A row that could not become a document."""
    model_config = ConfigDict(frozen=True)

    row_number: int
    handle: str
    message: str

    def __str__(self) -> str:
        return f"Linha {self.row_number} (Handle: {self.handle}): {self.message}"


class BatchResult(BaseModel):
    """
    Report for one processed upload.

    Attributes:
        service_type: Service type the batch was mapped as
        generated_files: Filenames written, in source row order
        errors: Rows that failed, in source row order
        skipped_rows: Rows ignored because their handle was blank
        total_rows: Data rows read from the source (header excluded)
    """
    service_type: ServiceType
    generated_files: List[str] = Field(default_factory=list)
    errors: List[RowError] = Field(default_factory=list)
    skipped_rows: int = 0
    total_rows: int = 0

    def to_response(self) -> Dict[str, List[str]]:
        """Shape returned to HTTP callers."""
        return {
            "generatedFiles": list(self.generated_files),
            "errors": [str(error) for error in self.errors],
        }
