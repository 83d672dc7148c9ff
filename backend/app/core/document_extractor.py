"""
Document text extraction from local storage
Resolves a storage key under the storage directory and returns its plain text
"""

import asyncio
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from .logger import add_log_context

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md"}
DOCX_SUFFIX = ".docx"

# Direct text extraction, no OCR involved
DIRECT_EXTRACTION_CONFIDENCE = 100.0


class DocumentExtractionError(Exception):
    """Raised when a stored document cannot be read"""


class DocumentNotFoundError(DocumentExtractionError):
    pass


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    confidence: float


class DocumentExtractor:
    """
    Extract plain text from documents stored under `storage_dir`

    Supports .txt/.md (UTF-8) and .docx (paragraph text via python-docx).
    """

    def __init__(self, storage_dir: Union[str, Path]):
        self.storage_dir = Path(storage_dir)

    def _resolve(self, storage_key: str) -> Path:
        if not storage_key or not storage_key.strip():
            raise DocumentExtractionError("Storage key is empty")

        root = self.storage_dir.resolve()
        path = (root / storage_key).resolve()
        # Keys may not escape the storage directory
        if root != path and root not in path.parents:
            raise DocumentExtractionError(f"Storage key outside storage directory: {storage_key}")
        if not path.is_file():
            raise DocumentNotFoundError(f"Document not found: {storage_key}")
        return path

    def extract_sync(self, storage_key: str) -> ExtractionResult:
        path = self._resolve(storage_key)
        suffix = path.suffix.lower()

        try:
            if suffix in TEXT_SUFFIXES:
                text = path.read_text(encoding="utf-8")
            elif suffix == DOCX_SUFFIX:
                doc = Document(str(path))
                text = "\n".join(p.text for p in doc.paragraphs if p.text.strip())
            else:
                raise DocumentExtractionError(f"Unsupported document type: {suffix or 'none'}")
        except DocumentExtractionError:
            raise
        except (OSError, UnicodeDecodeError, ValueError, KeyError, PackageNotFoundError, zipfile.BadZipFile) as e:
            raise DocumentExtractionError(f"Failed to extract text from {storage_key}: {e}") from e

        if not text.strip():
            raise DocumentExtractionError(f"No text could be extracted from {storage_key}")

        logger.info(
            "Extracted document text",
            extra=add_log_context(storage_key=storage_key, characters=len(text), suffix=suffix)
        )
        return ExtractionResult(text=text, confidence=DIRECT_EXTRACTION_CONFIDENCE)

    async def extract(self, storage_key: str) -> ExtractionResult:
        """Extract without blocking the event loop"""
        return await asyncio.to_thread(self.extract_sync, storage_key)
