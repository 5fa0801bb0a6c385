"""
Row-to-voucher mapping, one strategy per service type.

Every strategy reads through the declarative tables in ``field_mappings``
and returns a Result instead of raising:

- ``Result.ok(voucher)`` when the row is complete
- ``Result.skipped()`` when the handle is blank (trailing export rows)
- ``Result.fail(...)`` with a RowError in ``details`` when required dates are invalid
"""
import logging
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from config import Settings
from field_mappings import FIELD_MAPPINGS, FieldTable, resolve_field
from models import (
    AirItinerary,
    BusItinerary,
    CarItinerary,
    FareBreakdown,
    HotelItinerary,
    Itinerary,
    RawRecord,
    RowError,
    ServiceType,
    Voucher,
    VoucherHeader,
)
from normalizers import clean_text, lookup_code, normalize_date, normalize_handle, parse_decimal
from utils.result import Result

logger = logging.getLogger(__name__)

# Human-readable labels used in row error messages
FIELD_LABELS = {
    "data_emissao": "Data de Emissão",
    "data_embarque": "Data de Embarque",
    "checkin": "Data de Check-In",
    "checkout": "Data de Check-Out",
    "data_retirada": "Data de Retirada",
    "data_devolucao": "Data de Devolução",
    "data_entrada": "Data de Entrada",
}

REQUIRED_DATES: Mapping[ServiceType, Tuple[str, ...]] = {
    ServiceType.AIR: ("data_emissao", "data_embarque"),
    ServiceType.HOTEL: ("data_emissao", "checkin", "checkout"),
    ServiceType.CAR: ("data_emissao", "data_retirada", "data_devolucao"),
    ServiceType.BUS: ("data_emissao", "data_entrada"),
}


class CodeTables(BaseModel):
    """Immutable lookup tables injected into the mapper."""
    model_config = ConfigDict(frozen=True)

    carrier_codes: Dict[str, str]
    payment_codes: Dict[str, str]
    default_currency: str = "BRL"

    @classmethod
    def from_settings(cls, settings: Settings) -> "CodeTables":
        return cls(
            carrier_codes=dict(settings.carrier_codes),
            payment_codes=dict(settings.payment_codes),
            default_currency=settings.default_currency,
        )


class RowFields:
    """Accessor over one raw row through a service type's field table."""

    def __init__(self, record: RawRecord, table: FieldTable):
        self.record = record
        self.table = table

    def raw(self, field: str) -> Any:
        return resolve_field(self.record, self.table.get(field, ()))

    def text(self, field: str) -> str:
        return clean_text(self.raw(field))

    def as_date(self, field: str) -> Optional[date]:
        return normalize_date(self.raw(field))

    def amount(self, field: str):
        return parse_decimal(self.raw(field))


class RecordMapper:
    """
    Maps raw rows into canonical vouchers.

    Attributes:
        codes: Carrier and payment-method lookup tables
        field_mappings: Source-header table per service type
    """

    def __init__(self, codes: CodeTables, field_mappings: Mapping[ServiceType, FieldTable] = FIELD_MAPPINGS):
        self.codes = codes
        self.field_mappings = field_mappings
        self._itinerary_builders: Dict[ServiceType, Callable[[RowFields, Dict[str, date]], Itinerary]] = {
            ServiceType.AIR: self._air_itinerary,
            ServiceType.HOTEL: self._hotel_itinerary,
            ServiceType.CAR: self._car_itinerary,
            ServiceType.BUS: self._bus_itinerary,
        }

    def map_row(self, service_type: ServiceType, record: RawRecord, row_number: int) -> Result[Voucher]:
        """
        Map one raw row.

        Args:
            service_type: Service type selected by the caller
            record: Parsed row
            row_number: Spreadsheet row number (header is row 1)

        Returns:
            Result[Voucher]: voucher, skip, or failure carrying a RowError
        """
        fields = RowFields(record, self.field_mappings[service_type])
        handle = normalize_handle(fields.raw("handle"))
        if not handle:
            logger.debug("Skipping row without handle", extra={"row_number": row_number})
            return Result.skipped()

        dates: Dict[str, date] = {}
        invalid: List[str] = []
        for field in REQUIRED_DATES[service_type]:
            value = fields.as_date(field)
            if value is None:
                invalid.append(FIELD_LABELS[field])
            else:
                dates[field] = value

        if invalid:
            error = RowError(
                row_number=row_number,
                handle=handle,
                message=f"Campo(s) obrigatório(s) vazio(s) ou inválido(s): {', '.join(invalid)}.",
            )
            return Result.fail(error.message, details=error)

        try:
            voucher = self._voucher(service_type, fields, handle, dates)
        except ValidationError as exc:
            error = RowError(row_number=row_number, handle=handle, message=f"Valor inválido: {exc.errors()[0]['msg']}")
            return Result.fail(error.message, details=error)
        return Result.ok(voucher)

    def _voucher(self, service_type: ServiceType, fields: RowFields, handle: str, dates: Dict[str, date]) -> Voucher:
        return Voucher(
            service_type=service_type,
            header=self._header(service_type, fields, handle, dates["data_emissao"]),
            fare=FareBreakdown(
                tarifa=fields.amount("tarifa"),
                taxa=fields.amount("taxa"),
                taxa_du=fields.amount("taxa_du"),
            ),
            itinerary=self._itinerary_builders[service_type](fields, dates),
        )

    def _header(self, service_type: ServiceType, fields: RowFields, handle: str, issued: date) -> VoucherHeader:
        return VoucherHeader(
            handle=handle,
            requisicao=fields.text("requisicao"),
            data_emissao=issued,
            forma_pagamento=lookup_code(fields.raw("forma_pagamento"), self.codes.payment_codes),
            moeda=fields.text("moeda").upper() or self.codes.default_currency,
            fornecedor=self._vendor(service_type, fields),
            num_bilhete=fields.text("num_bilhete"),
            localizador=fields.text("localizador"),
            passageiro=fields.text("passageiro"),
            matricula=fields.text("matricula"),
            emissor=fields.text("emissor"),
            cliente=fields.text("cliente"),
            centro_custo=fields.text("centro_custo"),
            solicitante=fields.text("solicitante"),
            aprovador=fields.text("aprovador"),
            departamento=fields.text("departamento"),
            motivo_viagem=fields.text("motivo_viagem"),
        )

    def _vendor(self, service_type: ServiceType, fields: RowFields) -> str:
        if service_type is ServiceType.AIR:
            return lookup_code(fields.raw("cia"), self.codes.carrier_codes)
        vendor_field = {
            ServiceType.HOTEL: "hotel",
            ServiceType.CAR: "locadora",
            ServiceType.BUS: "viacao",
        }[service_type]
        return fields.text(vendor_field)

    def _air_itinerary(self, fields: RowFields, dates: Dict[str, date]) -> AirItinerary:
        departure = dates["data_embarque"]
        return AirItinerary(
            origem=fields.text("origem").upper(),
            destino=fields.text("destino").upper(),
            data_embarque=departure,
            # no return date column means a same-day return leg
            data_retorno=fields.as_date("data_retorno") or departure,
            classe=fields.text("classe"),
            cia=fields.text("cia").upper(),
        )

    def _hotel_itinerary(self, fields: RowFields, dates: Dict[str, date]) -> HotelItinerary:
        return HotelItinerary(
            checkin=dates["checkin"],
            checkout=dates["checkout"],
            tipo_acomodacao=fields.text("tipo_acomodacao"),
            hotel=fields.text("hotel"),
            cidade=fields.text("cidade"),
        )

    def _car_itinerary(self, fields: RowFields, dates: Dict[str, date]) -> CarItinerary:
        return CarItinerary(
            cidade_retirada=fields.text("cidade_retirada"),
            data_retirada=dates["data_retirada"],
            cidade_devolucao=fields.text("cidade_devolucao"),
            data_devolucao=dates["data_devolucao"],
            locadora=fields.text("locadora"),
        )

    def _bus_itinerary(self, fields: RowFields, dates: Dict[str, date]) -> BusItinerary:
        return BusItinerary(
            data_entrada=dates["data_entrada"],
            cidade_origem=fields.text("cidade_origem"),
            cidade_destino=fields.text("cidade_destino"),
        )
