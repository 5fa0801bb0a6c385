"""Filesystem destination for generated documents."""
import logging
from pathlib import Path
from typing import Union

from models import GeneratedDocument

logger = logging.getLogger(__name__)


class FileSystemSink:
    """
    Writes each document as ``<output_dir>/<filename>``.

    Bytes are written exactly as encoded by the document builder. A second
    document with the same filename replaces the first.
    """

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def write(self, document: GeneratedDocument) -> Path:
        name = Path(document.filename).name
        if name != document.filename or name in ("", ".", ".."):
            raise ValueError(f"Nome de arquivo inválido: {document.filename}")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / name
        path.write_bytes(document.content)
        logger.debug("Wrote document", extra={"path": str(path), "size_bytes": len(document.content)})
        return path
