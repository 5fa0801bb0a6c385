from datetime import date, datetime
from decimal import Decimal

import pytest
from lxml import etree

from document_builder import DocumentBuilder, encode_document, format_amount, safe_element
from models import (
    AirItinerary,
    BusItinerary,
    CarItinerary,
    FareBreakdown,
    HotelItinerary,
    ServiceType,
    Voucher,
    VoucherHeader,
)

GENERATED_AT = datetime(2024, 12, 1, 9, 5)


def make_voucher(service_type, itinerary, **header):
    fields = {"handle": "AB12", "data_emissao": date(2024, 11, 20), **header}
    return Voucher(
        service_type=service_type,
        header=VoucherHeader(**fields),
        fare=FareBreakdown(tarifa=Decimal("1500"), taxa=Decimal("45.9"), taxa_du=0),
        itinerary=itinerary,
    )


@pytest.fixture
def builder(settings):
    return DocumentBuilder(settings)


def parse(document):
    return etree.fromstring(document.content)


class TestSafeElement:
    """
    Tests for the safe_element helper.
    """

    def test_none_becomes_empty_text(self):
        root = etree.Element("root")

        safe_element(root, "vazio", None)
        safe_element(root, "zero", 0)

        assert root.find("vazio") is not None
        assert root.find("vazio").text in ("", None)
        assert root.find("zero").text == "0"

    def test_control_characters_are_dropped(self):
        root = etree.Element("root")

        safe_element(root, "nome", "Jo\x0bão")

        assert root.find("nome").text == "João"

    @pytest.mark.parametrize(
        "raw",
        ["Jo\uffffão", "Jo\ufffeão", "Jo\ud800ão"],
        ids=["uffff", "ufffe", "lone-surrogate"]
    )
    def test_noncharacters_and_surrogates_are_dropped(self, raw):
        root = etree.Element("root")

        safe_element(root, "nome", raw)

        assert root.find("nome").text == "João"
        assert b"Jo\xe3o" in encode_document(root, "iso-8859-1")


class TestEncoding:
    """
    Tests for the byte-level serialization step.
    """

    def test_latin1_characters_are_single_bytes(self):
        root = etree.Element("bilhetes")
        safe_element(root, "nome", "João")

        content = encode_document(root, "iso-8859-1")

        assert content.startswith(b"<?xml version='1.0' encoding='iso-8859-1'?>")
        assert "João".encode("iso-8859-1") in content

    def test_characters_outside_latin1_become_references(self):
        root = etree.Element("bilhetes")
        safe_element(root, "nome", "Zoë €")

        content = encode_document(root, "iso-8859-1")

        assert b"&#8364;" in content
        assert etree.fromstring(content).find("nome").text == "Zoë €"

    def test_format_amount(self):
        assert format_amount(Decimal("1500")) == "1500.00"
        assert format_amount(10.005) == "10.01"
        assert format_amount(42) == "42.00"


class TestDocumentBuilder:
    """
    Tests for DocumentBuilder.build.
    """

    def test_air_document(self, builder):
        """
        Test the header block, the valores block and the two swapped legs.

        Args:
            builder: Fixture providing a DocumentBuilder
        """
        itinerary = AirItinerary(
            origem="GRU", destino="SDU", data_embarque=date(2024, 12, 25),
            data_retorno=date(2024, 12, 28), classe="Y",
        )
        document = builder.build(make_voucher(ServiceType.AIR, itinerary, fornecedor="la"), GENERATED_AT)
        root = parse(document)

        assert document.filename == "wintour-air-ab12.xml"
        assert root.tag == "bilhetes"
        assert root.findtext("nr_arquivo") == "ab12"
        assert root.findtext("data_geracao") == "01/12/2024"
        assert root.findtext("hora_geracao") == "09:05"
        assert root.findtext("nome_agencia") == "uniglobe pro"
        assert root.findtext("versao_xml") == "4"
        assert root.findtext("bilhete/codigo_produto") == "tkt"
        assert root.findtext("bilhete/data_lancamento") == "20/11/2024"

        items = root.findall("bilhete/valores/item")
        assert [(i.findtext("codigo"), i.findtext("valor")) for i in items] == [
            ("tarifa", "1500.00"), ("taxa", "45.90"), ("taxa_du", "0.00"),
        ]

        legs = root.findall("bilhete/roteiro/aereo/trecho")
        assert len(legs) == 2
        assert (legs[0].findtext("aeroporto_origem"), legs[0].findtext("aeroporto_destino")) == ("GRU", "SDU")
        assert (legs[1].findtext("aeroporto_origem"), legs[1].findtext("aeroporto_destino")) == ("SDU", "GRU")
        assert legs[1].findtext("data_partida") == "28/12/2024"
        assert all(leg.findtext("numero_voo") == "9999" for leg in legs)
        assert all(leg.findtext("cia_iata") == "la" for leg in legs)

    def test_every_header_tag_is_present_when_empty(self, builder):
        itinerary = BusItinerary(data_entrada=date(2024, 2, 5))
        root = parse(builder.build(make_voucher(ServiceType.BUS, itinerary), GENERATED_AT))

        for tag in ("idv_externo", "fornecedor", "num_bilhete", "localizador", "passageiro",
                    "forma_pagamento", "cliente", "aprovador", "motivo_viagem"):
            assert root.find(f"bilhete/{tag}") is not None, tag

    def test_hotel_document(self, builder):
        itinerary = HotelItinerary(checkin=date(2024, 3, 10), checkout=date(2024, 3, 12), hotel="Central")
        root = parse(builder.build(make_voucher(ServiceType.HOTEL, itinerary), GENERATED_AT))

        hotel = root.find("bilhete/roteiro/hotel")
        assert hotel.findtext("dt_entrada") == "10/03/2024"
        assert hotel.findtext("dt_saida") == "12/03/2024"
        assert hotel.findtext("nr_apartamentos") == "1"
        assert hotel.findtext("nr_hospedes") == "1"

    def test_car_document(self, builder):
        itinerary = CarItinerary(
            cidade_retirada="Recife", data_retirada=date(2024, 5, 3),
            cidade_devolucao="Natal", data_devolucao=date(2024, 5, 6),
        )
        root = parse(builder.build(make_voucher(ServiceType.CAR, itinerary), GENERATED_AT))

        locacao = root.find("bilhete/roteiro/locacao")
        assert locacao.findtext("cidade_retirada") == "Recife"
        assert locacao.findtext("dt_devolucao") == "06/05/2024"
        assert locacao.findtext("categoria") == "SEM INFORMACAO"

    def test_bus_description(self, builder):
        itinerary = BusItinerary(data_entrada=date(2024, 2, 5), cidade_origem="São Paulo", cidade_destino="Santos")
        document = builder.build(make_voucher(ServiceType.BUS, itinerary), GENERATED_AT)

        assert document.filename == "wintour-onibus-ab12.xml"
        assert "SÃO PAULO" in document.text
        assert parse(document).findtext("bilhete/roteiro/descricao") == "05/02/2024 - SÃO PAULO - SANTOS"

    def test_same_voucher_same_bytes(self, builder):
        itinerary = BusItinerary(data_entrada=date(2024, 2, 5))
        voucher = make_voucher(ServiceType.BUS, itinerary)

        assert builder.build(voucher, GENERATED_AT).content == builder.build(voucher, GENERATED_AT).content
