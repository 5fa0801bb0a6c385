"""
Pytest configuration file.

This file is automatically loaded by pytest and provides global test configuration.
It ensures the project's source directory is added to the Python path so that
modules can be imported properly during test execution, and provides the
settings and sample rows shared by the test modules.
"""
import os
import sys

import pytest

# Add the current directory to the Python path
# This ensures imports work correctly when running tests
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from config import Settings  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    """
    Settings pointing output and logs at a temporary directory.

    Returns:
        Settings: isolated configuration for one test
    """
    return Settings(output_dir=tmp_path / "xml", log_dir=tmp_path / "logs")


@pytest.fixture
def air_row():
    """A complete air row using the compact Benner headers."""
    return {
        "Handle": " AB12 ",
        "DataEmissão": "20/11/2024",
        "DataEmbarque": "25/12/2024",
        "RequisiçãoBenner": "REQ-001",
        "AéreoLocalizador": "XYZ123",
        "PassageiroNomeCompleto": "João da Silva",
        "PassageiroMatrícula": "4321",
        "CiaAérea": "latam",
        "AeroportoOrigem": "gru",
        "AeroportoDestino": "sdu",
        "FormaPagamento": "Faturado",
        "Emissor": "Maria",
        "InformaçãoCliente": "ACME",
        "BI": "CC-10",
        "Solicitante": "Pedro",
        "AprovadorEfetivo": "Ana",
        "Departamento": "TI",
        "Finalidade": "Reunião",
        "Bilhete": "9572100000001",
        "TarifaTotalcomTaxas": "1.500,00",
        "Taxas": "R$ 45,90",
        "DescontoAéreo": "",
    }


@pytest.fixture
def hotel_row():
    return {
        "Handle": "H1",
        "DataEmissão": "01/03/2024",
        "DataCheck-In": "10/03/2024",
        "DataCheck-Out": "12/03/2024",
        "TipoAcomodação": "Single",
        "HotelNome": "Hotel Central",
        "HotelCidade": "Curitiba",
        "FormaPagamento": "CARTAO",
        "ValorTotalHospedagem": "R$ 890,50",
    }


@pytest.fixture
def car_row():
    return {
        "handle": "C9",
        "data_emissao": "2024-05-02",
        "cidade_retirada": "Recife",
        "data_retirada": "2024-05-03",
        "cidade_devolucao": "Natal",
        "data_devolucao": "2024-05-06",
        "locadora": "Localiza",
        "valor_locacao": "612,00",
    }


@pytest.fixture
def bus_row():
    return {
        "Handle": "B7",
        "Data Emissão": "02/02/2024",
        "Data Entrada": "05/02/2024",
        "Cidade Origem": "São Paulo",
        "Cidade Destino": "Santos",
        "Valor": "89,90",
    }
