"""
Wintour Voucher Generator

This package converts travel-service exports (air, hotel, car and bus) into
Wintour XML voucher documents, one document per spreadsheet row, and reports
which rows could not be converted.

Key modules:
- main.py: FastAPI application with the upload endpoint
- voucher_process.py: Batch processing with per-row failure isolation
- tabular_parser.py: Spreadsheet and CSV decoding
- normalizers.py / field_mappings.py / record_mapper.py: Row-to-voucher mapping
- document_builder.py / output_sink.py: XML rendering and persistence
- utils/result.py: Result pattern implementation for error handling
"""
