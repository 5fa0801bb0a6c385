"""Application configuration using pydantic-settings (env prefix ``WINTOUR_``)."""

from functools import lru_cache
from pathlib import Path
from typing import Dict

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Runtime settings for the voucher generator.

    Lookup tables live here so they can be replaced per environment (or per
    test) instead of being patched as module globals.
    """

    model_config = SettingsConfigDict(env_prefix="WINTOUR_", env_file=".env", extra="ignore")

    output_dir: Path = BASE_DIR / "xml"
    log_dir: Path = BASE_DIR / "logs"
    log_level: str = "INFO"

    # Legacy single-byte encodings used on both ends of the pipeline
    csv_encoding: str = "iso-8859-1"
    csv_delimiter: str = ","
    xml_encoding: str = "iso-8859-1"

    agency_name: str = "uniglobe pro"
    schema_version: str = "4"
    default_currency: str = "BRL"
    date_format: str = "%d/%m/%Y"
    time_format: str = "%H:%M"

    product_codes: Dict[str, str] = {
        "air": "tkt",
        "hotel": "htl",
        "carro": "car",
        "onibus": "rod",
    }
    carrier_codes: Dict[str, str] = {
        "LATAM": "la",
        "AZUL": "ad",
        "GOL": "g3",
    }
    payment_codes: Dict[str, str] = {
        "CARTAO": "cc",
        "CARTÃO": "cc",
        "FATURADO": "iv",
        "INVOICE": "iv",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
