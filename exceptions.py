"""Exceptions raised when an upload cannot be read at all."""


class VoucherPipelineError(Exception):
    """Base exception for the voucher pipeline."""


class FatalParseError(VoucherPipelineError):
    """The source container (workbook or CSV stream) could not be read.

    Raised before any row exists, so it aborts the whole batch.
    """


class UnsupportedFormatError(FatalParseError):
    """The uploaded file extension is not a supported spreadsheet or CSV."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"Formato de arquivo não suportado: {filename or '<sem nome>'}")
