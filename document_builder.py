"""
Renders canonical vouchers into the Wintour XML layout.

Building the element tree and encoding it are separate steps: ``build``
assembles the tree, ``encode_document`` is the only place that turns it
into bytes in the legacy single-byte encoding. lxml writes characters the
encoding cannot represent as numeric character references, so the output
is always valid in the declared encoding and nothing is lost.
"""
import logging
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from lxml import etree

from config import Settings
from models import (
    AirItinerary,
    BusItinerary,
    CarItinerary,
    GeneratedDocument,
    HotelItinerary,
    Voucher,
)

logger = logging.getLogger(__name__)

FLIGHT_NUMBER_PLACEHOLDER = "9999"
ROOM_COUNT_PLACEHOLDER = "1"
GUEST_COUNT_PLACEHOLDER = "1"
CAR_CATEGORY_PLACEHOLDER = "SEM INFORMACAO"
FARE_COMPONENTS = ("tarifa", "taxa", "taxa_du")

# Characters XML 1.0 does not allow in text nodes
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def safe_element(parent: etree._Element, tag: str, value: Any = None) -> etree._Element:
    """Append ``tag`` under ``parent``; None becomes an empty text node."""
    element = etree.SubElement(parent, tag)
    element.text = "" if value is None else _XML_ILLEGAL.sub("", str(value))
    return element


def format_amount(value: Any) -> str:
    return str(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def document_filename(voucher: Voucher) -> str:
    return f"wintour-{voucher.service_type.value}-{voucher.handle}.xml"


def encode_document(root: etree._Element, encoding: str) -> bytes:
    """Serialize ``root`` with an XML declaration naming ``encoding``."""
    return etree.tostring(root, encoding=encoding, xml_declaration=True, pretty_print=True)


class DocumentBuilder:
    """
    Builds one XML document per voucher.

    Attributes:
        settings: Agency name, schema version, date formats, product codes and output encoding
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def build(self, voucher: Voucher, generated_at: Optional[datetime] = None) -> GeneratedDocument:
        """
        Render ``voucher`` and encode it.

        Args:
            voucher: Canonical voucher
            generated_at: Generation timestamp written to the header (defaults to now)

        Returns:
            GeneratedDocument: filename plus encoded bytes
        """
        root = self.render(voucher, generated_at or datetime.now())
        return GeneratedDocument(
            filename=document_filename(voucher),
            content=encode_document(root, self.settings.xml_encoding),
            encoding=self.settings.xml_encoding,
        )

    def render(self, voucher: Voucher, generated_at: datetime) -> etree._Element:
        header = voucher.header
        root = etree.Element("bilhetes")
        safe_element(root, "nr_arquivo", header.handle)
        safe_element(root, "data_geracao", generated_at.strftime(self.settings.date_format))
        safe_element(root, "hora_geracao", generated_at.strftime(self.settings.time_format))
        safe_element(root, "nome_agencia", self.settings.agency_name)
        safe_element(root, "versao_xml", self.settings.schema_version)

        bilhete = etree.SubElement(root, "bilhete")
        safe_element(bilhete, "idv_externo", header.requisicao)
        safe_element(bilhete, "data_lancamento", self._date(header.data_emissao))
        safe_element(bilhete, "codigo_produto", self.settings.product_codes.get(voucher.service_type.value))
        safe_element(bilhete, "fornecedor", header.fornecedor)
        safe_element(bilhete, "num_bilhete", header.num_bilhete)
        safe_element(bilhete, "localizador", header.localizador)
        safe_element(bilhete, "passageiro", header.passageiro)
        safe_element(bilhete, "matricula", header.matricula)
        safe_element(bilhete, "forma_pagamento", header.forma_pagamento)
        safe_element(bilhete, "moeda", header.moeda)
        safe_element(bilhete, "emissor", header.emissor)
        safe_element(bilhete, "cliente", header.cliente)
        safe_element(bilhete, "centro_custo", header.centro_custo)
        safe_element(bilhete, "solicitante", header.solicitante)
        safe_element(bilhete, "aprovador", header.aprovador)
        safe_element(bilhete, "departamento", header.departamento)
        safe_element(bilhete, "motivo_viagem", header.motivo_viagem)

        valores = etree.SubElement(bilhete, "valores")
        for component in FARE_COMPONENTS:
            item = etree.SubElement(valores, "item")
            safe_element(item, "codigo", component)
            safe_element(item, "valor", format_amount(getattr(voucher.fare, component)))

        roteiro = etree.SubElement(bilhete, "roteiro")
        itinerary = voucher.itinerary
        if isinstance(itinerary, AirItinerary):
            self._air(roteiro, itinerary, header.fornecedor)
        elif isinstance(itinerary, HotelItinerary):
            self._hotel(roteiro, itinerary)
        elif isinstance(itinerary, CarItinerary):
            self._car(roteiro, itinerary)
        elif isinstance(itinerary, BusItinerary):
            self._bus(roteiro, itinerary)
        return root

    def _date(self, value: Optional[date]) -> str:
        return value.strftime(self.settings.date_format) if value else ""

    def _air(self, roteiro: etree._Element, itinerary: AirItinerary, carrier_code: str) -> None:
        aereo = etree.SubElement(roteiro, "aereo")
        legs = (
            (itinerary.origem, itinerary.destino, itinerary.data_embarque),
            (itinerary.destino, itinerary.origem, itinerary.data_retorno),
        )
        for origin, destination, departure in legs:
            trecho = etree.SubElement(aereo, "trecho")
            safe_element(trecho, "cia_iata", carrier_code)
            safe_element(trecho, "numero_voo", FLIGHT_NUMBER_PLACEHOLDER)
            safe_element(trecho, "aeroporto_origem", origin)
            safe_element(trecho, "aeroporto_destino", destination)
            safe_element(trecho, "data_partida", self._date(departure))
            safe_element(trecho, "classe", itinerary.classe)

    def _hotel(self, roteiro: etree._Element, itinerary: HotelItinerary) -> None:
        hotel = etree.SubElement(roteiro, "hotel")
        safe_element(hotel, "nome_hotel", itinerary.hotel)
        safe_element(hotel, "cidade", itinerary.cidade)
        safe_element(hotel, "tipo_acomodacao", itinerary.tipo_acomodacao)
        safe_element(hotel, "dt_entrada", self._date(itinerary.checkin))
        safe_element(hotel, "dt_saida", self._date(itinerary.checkout))
        safe_element(hotel, "nr_apartamentos", ROOM_COUNT_PLACEHOLDER)
        safe_element(hotel, "nr_hospedes", GUEST_COUNT_PLACEHOLDER)

    def _car(self, roteiro: etree._Element, itinerary: CarItinerary) -> None:
        locacao = etree.SubElement(roteiro, "locacao")
        safe_element(locacao, "locadora", itinerary.locadora)
        safe_element(locacao, "cidade_retirada", itinerary.cidade_retirada)
        safe_element(locacao, "dt_retirada", self._date(itinerary.data_retirada))
        safe_element(locacao, "cidade_devolucao", itinerary.cidade_devolucao)
        safe_element(locacao, "dt_devolucao", self._date(itinerary.data_devolucao))
        safe_element(locacao, "categoria", CAR_CATEGORY_PLACEHOLDER)

    def _bus(self, roteiro: etree._Element, itinerary: BusItinerary) -> None:
        description = " - ".join((
            self._date(itinerary.data_entrada),
            itinerary.cidade_origem.upper(),
            itinerary.cidade_destino.upper(),
        ))
        safe_element(roteiro, "descricao", description)
