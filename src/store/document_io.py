"""Backing document IO helpers.

This module isolates whole-file JSON reads and atomic writes.
Writes go to a sibling temporary file that replaces the target
only after a complete flush, so a failed save leaves prior content intact.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from core.constants import DOCUMENT_ENCODING, DOCUMENT_INDENT, TEMP_FILE_SUFFIX
from core.errors import JsonStoreDecodeError, JsonStoreEncodeError, JsonStoreWriteError


def read_document(document_path: Path) -> object | None:
    """Read and parse the backing document.

    Args:
        document_path: Backing JSON file path.

    Returns:
        Parsed JSON payload, or None when the file does not exist.

    Raises:
        JsonStoreDecodeError: If the file is unreadable or not valid JSON.
    """
    if not document_path.exists():
        return None
    try:
        return json.loads(document_path.read_text(encoding=DOCUMENT_ENCODING))
    except json.JSONDecodeError as error:
        raise JsonStoreDecodeError(
            f"Failed to parse backing document at {document_path}: {error.msg}. "
            "Restore the file from a backup or remove it to start empty."
        ) from error
    except (OSError, UnicodeDecodeError) as error:
        raise JsonStoreDecodeError(
            f"Failed to read backing document at {document_path}: {error}."
        ) from error


def encode_document(payload: object) -> str:
    """Render the backing document text.

    Args:
        payload: JSON-safe document payload.

    Returns:
        Pretty-printed JSON text with trailing newline.

    Raises:
        JsonStoreEncodeError: If the payload holds non-JSON values or
            strings that cannot be encoded as UTF-8.
    """
    try:
        text = json.dumps(payload, indent=DOCUMENT_INDENT, ensure_ascii=False) + "\n"
        text.encode(DOCUMENT_ENCODING)
    except (TypeError, ValueError) as error:
        raise JsonStoreEncodeError(
            f"Failed to serialize snapshots: {error}. "
            "Snapshot attribute values must be JSON-compatible."
        ) from error
    return text


def write_document_atomic(document_path: Path, text: str) -> None:
    """Replace the backing document with new content in one step.

    Args:
        document_path: Backing JSON file path.
        text: Full document text.

    Raises:
        JsonStoreWriteError: If the temporary write or rename fails.
    """
    parent_dir = document_path.parent
    temp_path: Path | None = None
    try:
        parent_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding=DOCUMENT_ENCODING,
            dir=parent_dir,
            prefix=f".{document_path.name}.",
            suffix=TEMP_FILE_SUFFIX,
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, document_path)
    except OSError as error:
        _discard_temp_file(temp_path)
        raise JsonStoreWriteError(
            f"Failed to write backing document {document_path}: {error}. "
            "The previous document was left unchanged; retry the save."
        ) from error
    except Exception:
        _discard_temp_file(temp_path)
        raise


def _discard_temp_file(temp_path: Path | None) -> None:
    if temp_path is not None:
        temp_path.unlink(missing_ok=True)
