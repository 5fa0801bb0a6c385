"""
Source-column tables for each service type.

Exports went through three header revisions:

1. compact Benner headers (``DataEmissão``, ``AéreoLocalizador``)
2. spaced labels (``Data Emissão``, ``Localizador``)
3. ASCII snake_case (``data_emissao``, ``localizador``)

Each canonical field lists its source headers newest-compatible first; the
mapper takes the first one holding a non-empty value. Adding a revision
means adding a header here, never a new code path.
"""
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from models import RawRecord, ServiceType
from normalizers import clean_text

FieldTable = Mapping[str, Tuple[str, ...]]

COMMON_FIELDS: FieldTable = MappingProxyType({
    "handle": ("Handle", "handle", "HANDLE"),
    "requisicao": ("RequisiçãoBenner", "Requisição", "requisicao"),
    "data_emissao": ("DataEmissão", "Data Emissão", "data_emissao"),
    "forma_pagamento": ("FormaPagamento", "Forma de Pagamento", "forma_pagamento"),
    "moeda": ("Moeda", "moeda"),
    "passageiro": ("PassageiroNomeCompleto", "Passageiro", "passageiro"),
    "matricula": ("PassageiroMatrícula", "Matrícula", "matricula"),
    "emissor": ("Emissor", "emissor"),
    "cliente": ("InformaçãoCliente", "Cliente", "cliente"),
    "centro_custo": ("BI", "Centro de Custo", "centro_custo"),
    "solicitante": ("Solicitante", "solicitante"),
    "aprovador": ("AprovadorEfetivo", "Aprovador", "aprovador"),
    "departamento": ("Departamento", "departamento"),
    "motivo_viagem": ("Finalidade", "Motivo da Viagem", "motivo_viagem"),
    "localizador": ("Localizador", "localizador"),
    "taxa": ("Taxas", "Taxa", "taxa"),
    "taxa_du": ("TaxaDU", "Taxa DU", "taxa_du"),
})

AIR_FIELDS: FieldTable = MappingProxyType({
    "data_embarque": ("DataEmbarque", "Data Embarque", "data_embarque"),
    "data_retorno": ("DataRetorno", "Data Retorno", "data_retorno"),
    "localizador": ("AéreoLocalizador", "Localizador", "localizador"),
    "num_bilhete": ("Bilhete", "Número Bilhete", "num_bilhete"),
    "cia": ("CiaAérea", "Cia Aérea", "cia_aerea"),
    "origem": ("AeroportoOrigem", "Origem", "origem"),
    "destino": ("AeroportoDestino", "Destino", "destino"),
    "classe": ("ClasseVoo", "Classe", "classe"),
    "tarifa": ("TarifaTotalcomTaxas", "Tarifa", "tarifa"),
    "taxa_du": ("DescontoAéreo", "Taxa DU", "taxa_du"),
})

HOTEL_FIELDS: FieldTable = MappingProxyType({
    "checkin": ("DataCheck-In", "Data Check-In", "data_checkin"),
    "checkout": ("DataCheck-Out", "Data Check-Out", "data_checkout"),
    "tipo_acomodacao": ("TipoAcomodação", "Tipo Acomodação", "tipo_acomodacao"),
    "hotel": ("HotelNome", "Hotel", "hotel"),
    "cidade": ("HotelCidade", "Cidade", "cidade"),
    "localizador": ("HotelLocalizador", "Localizador", "localizador"),
    "tarifa": ("ValorTotalHospedagem", "Valor Hospedagem", "valor_hospedagem"),
})

CAR_FIELDS: FieldTable = MappingProxyType({
    "cidade_retirada": ("CidadeRetirada", "Cidade Retirada", "cidade_retirada"),
    "data_retirada": ("DataRetirada", "Data Retirada", "data_retirada"),
    "cidade_devolucao": ("CidadeDevolução", "Cidade Devolução", "cidade_devolucao"),
    "data_devolucao": ("DataDevolução", "Data Devolução", "data_devolucao"),
    "locadora": ("Locadora", "locadora"),
    "localizador": ("CarroLocalizador", "Localizador", "localizador"),
    "tarifa": ("ValorTotalLocação", "Valor Locação", "valor_locacao"),
})

BUS_FIELDS: FieldTable = MappingProxyType({
    "data_entrada": ("DataEntrada", "Data Entrada", "data_entrada"),
    "cidade_origem": ("CidadeOrigem", "Cidade Origem", "cidade_origem"),
    "cidade_destino": ("CidadeDestino", "Cidade Destino", "cidade_destino"),
    "viacao": ("Viação", "Empresa", "viacao"),
    "localizador": ("OnibusLocalizador", "Localizador", "localizador"),
    "tarifa": ("ValorDiversos", "Valor", "valor"),
})

FIELD_MAPPINGS: Mapping[ServiceType, FieldTable] = MappingProxyType({
    ServiceType.AIR: MappingProxyType({**COMMON_FIELDS, **AIR_FIELDS}),
    ServiceType.HOTEL: MappingProxyType({**COMMON_FIELDS, **HOTEL_FIELDS}),
    ServiceType.CAR: MappingProxyType({**COMMON_FIELDS, **CAR_FIELDS}),
    ServiceType.BUS: MappingProxyType({**COMMON_FIELDS, **BUS_FIELDS}),
})


def resolve_field(record: RawRecord, aliases: Tuple[str, ...]) -> Any:
    """Return the first non-empty value among ``aliases`` (``""`` when none)."""
    for header in aliases:
        value = record.get(header, "")
        if clean_text(value):
            return value
    return ""
