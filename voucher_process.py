import logging
import time
import uuid
from datetime import datetime
from typing import Optional

from config import Settings
from document_builder import DocumentBuilder
from exceptions import FatalParseError, UnsupportedFormatError
from models import BatchResult, RawRecord, RowError, ServiceType, Voucher
from output_sink import FileSystemSink
from record_mapper import CodeTables, RecordMapper
from tabular_parser import detect_source_format, parse_upload
from utils.result import Result

# Configure logger with more structured format
logger = logging.getLogger(__name__)

# Spreadsheet row of the first data record (row 1 is the header)
FIRST_DATA_ROW = 2


class LogContext:
    """Context manager for tracking and logging operation metrics"""
    def __init__(self, operation_name: str, **kwargs):
        self.operation_name = operation_name
        self.start_time = None
        self.request_id = kwargs.get('request_id', str(uuid.uuid4())[:8])
        self.extra = kwargs

    def __enter__(self):
        self.start_time = time.time()
        logger.info(f"Starting {self.operation_name}", extra={"request_id": self.request_id, **self.extra})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        if exc_type:
            logger.error(
                f"Failed {self.operation_name} in {duration:.2f}s: {str(exc_val)}",
                extra={"request_id": self.request_id, "duration": duration, **self.extra},
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            logger.info(
                f"Completed {self.operation_name} in {duration:.2f}s",
                extra={"request_id": self.request_id, "duration": duration, **self.extra}
            )


class VoucherProcessor:
    """
    Turns an uploaded export into one XML document per row.

    This class:
    - Parses the upload (a failure here aborts the batch)
    - Maps, builds and writes each row independently
    - Collects generated filenames and row errors in source row order

    Attributes:
        settings: Runtime configuration
        mapper: Row-to-voucher mapper with the configured code tables
        builder: XML document builder
        sink: Destination for generated documents
    """

    def __init__(self, settings: Settings, sink: Optional[FileSystemSink] = None):
        self.settings = settings
        self.mapper = RecordMapper(CodeTables.from_settings(settings))
        self.builder = DocumentBuilder(settings)
        self.sink = sink or FileSystemSink(settings.output_dir)

    def process_upload(
        self,
        content: bytes,
        filename: str,
        service_type: ServiceType,
        generated_at: Optional[datetime] = None
    ) -> Result[BatchResult]:
        """
        Process an uploaded file as ``service_type`` vouchers.

        Args:
            content: Uploaded bytes
            filename: Original upload filename (selects spreadsheet or CSV)
            service_type: Service type chosen by the caller
            generated_at: Generation timestamp for every document (defaults to now)

        Returns:
            Result[BatchResult]: the batch report, or a failure when the file could not be read
        """
        request_id = str(uuid.uuid4())[:8]
        log_context = {
            "request_id": request_id,
            "upload_filename": filename,
            "service_type": service_type.value,
        }
        logger.info("Processing upload", extra=log_context)

        try:
            source_format = detect_source_format(filename)
            with LogContext("upload parsing", **log_context):
                records = parse_upload(content, source_format, self.settings)
        except UnsupportedFormatError as e:
            logger.warning(f"Rejected upload: {e}", extra=log_context)
            return Result.invalid_input(str(e))
        except FatalParseError as e:
            logger.warning(f"Fatal parse error: {e}", extra=log_context)
            return Result.unprocessable(str(e))

        log_context["row_count"] = len(records)
        with LogContext("row processing", **log_context):
            batch = self.process_records(records, service_type, generated_at or datetime.now())

        logger.info(
            f"Generated {len(batch.generated_files)} documents with {len(batch.errors)} row errors",
            extra={**log_context, "skipped_rows": batch.skipped_rows}
        )
        return Result.ok(batch)

    def process_records(self, records, service_type: ServiceType, generated_at: datetime) -> BatchResult:
        """
        Run every record through map, build and write, in order.

        A failing row only contributes an entry to ``errors``; the loop always
        reaches the last record.
        """
        batch = BatchResult(service_type=service_type, total_rows=len(records))
        for offset, record in enumerate(records):
            row_number = FIRST_DATA_ROW + offset
            outcome = self.process_row(record, service_type, row_number, generated_at)

            if outcome.is_skipped():
                batch.skipped_rows += 1
            elif outcome.is_success():
                batch.generated_files.append(outcome.data)
            else:
                batch.errors.append(outcome.details)
                logger.warning(str(outcome.details), extra={"row_number": row_number})
        return batch

    def process_row(
        self,
        record: RawRecord,
        service_type: ServiceType,
        row_number: int,
        generated_at: datetime
    ) -> Result[str]:
        """Map, build and write one row; success carries the written filename."""
        return self.mapper.map_row(service_type, record, row_number).and_then(
            lambda voucher: self._write(voucher, row_number, generated_at)
        )

    def _write(self, voucher: Voucher, row_number: int, generated_at: datetime) -> Result[str]:
        try:
            document = self.builder.build(voucher, generated_at)
        except Exception as e:
            logger.error(
                f"Unexpected error building XML: {str(e)}",
                extra={"row_number": row_number, "handle": voucher.handle},
                exc_info=True
            )
            error = RowError(row_number=row_number, handle=voucher.handle, message=f"Falha ao gerar XML: {e}")
            return Result.server_error(error.message, details=error)
        try:
            self.sink.write(document)
        except (OSError, ValueError) as e:
            error = RowError(row_number=row_number, handle=voucher.handle, message=f"Falha ao gravar XML: {e}")
            return Result.server_error(error.message, details=error)
        return Result.ok(document.filename)
