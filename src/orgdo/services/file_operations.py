"""File operations for org outlines.

Loading reads whole files and hands the text to the outline parser; saving
renders the document and replaces each target file with a temp-file-rename
write, so a failed save never leaves a half-written outline behind.
"""

import os
from pathlib import Path
from typing import Optional, Union

import structlog
from org_outline import OrgDocument, WorkflowStates

from orgdo.services.exceptions import DocumentReadError, DocumentWriteError

logger = structlog.get_logger()

PathLike = Union[str, Path]


def atomic_write(path: Path, content: str) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: On file I/O errors
        PermissionError: On permission errors
    """
    # Same directory as the target so the rename stays on one filesystem
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"

    try:
        temp_path.write_text(content, encoding="utf-8")

        with open(temp_path, "r+", encoding="utf-8") as f:
            f.flush()
            os.fsync(f.fileno())

        temp_path.replace(path)

        logger.debug(
            "atomic_write_success",
            path=str(path),
            size=len(content)
        )

    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error(
            "atomic_write_failed",
            path=str(path),
            error=str(e)
        )
        raise


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentReadError(str(path), f"Could not read document ({e})") from e


def load_document(path: PathLike, states: Optional[WorkflowStates] = None) -> OrgDocument:
    """
    Load a single outline file.

    A missing file gives an empty document bound to ``path``, so the first
    save creates it.

    Args:
        path: Outline file
        states: Workflow states recognised in headings

    Returns:
        Parsed OrgDocument

    Raises:
        DocumentReadError: If the file exists but cannot be read
    """
    path = Path(path)
    if not path.exists():
        logger.info("document_missing", path=str(path))
        return OrgDocument(path=str(path))
    if path.is_dir():
        raise DocumentReadError(str(path), "Expected a file but found a directory")

    document = OrgDocument.parse(_read_text(path), path=path, states=states)
    logger.info("document_loaded", path=str(path), items=len(document.items))
    return document


def load_directory(
    path: PathLike,
    states: Optional[WorkflowStates] = None,
    pattern: str = "*.org",
) -> OrgDocument:
    """
    Load every matching outline in a directory as one multi-file document.

    Files are taken in lexicographic order. A file that cannot be read is
    logged and skipped; the others still load.

    Args:
        path: Directory holding the outlines
        states: Workflow states recognised in headings
        pattern: Glob selecting the files

    Returns:
        OrgDocument with one wrapper item per file

    Raises:
        DocumentReadError: If ``path`` is missing or not a directory
    """
    directory = Path(path)
    if not directory.is_dir():
        raise DocumentReadError(str(directory), "Not a directory")

    documents = []
    for file_path in sorted(p for p in directory.glob(pattern) if p.is_file()):
        try:
            text = _read_text(file_path)
        except DocumentReadError as e:
            logger.warning("document_file_skipped", path=str(file_path), error=str(e))
            continue
        documents.append((file_path, OrgDocument.parse(text, path=file_path, states=states)))

    document = OrgDocument.from_files(directory, documents)
    logger.info(
        "directory_loaded",
        path=str(directory),
        pattern=pattern,
        files=len(documents),
    )
    return document


def save_document(document: OrgDocument) -> list[Path]:
    """
    Write a document back to disk.

    Single-file documents go to ``document.path``. Multi-file documents are
    split by source file and each file is replaced on its own.

    Args:
        document: Document to save

    Returns:
        Paths written

    Raises:
        DocumentWriteError: If the document has no path or a write fails
    """
    if document.path is None:
        raise DocumentWriteError("<unsaved>", "Document has no file path")

    target = Path(document.path)
    if document.is_multi_file or target.is_dir():
        outputs = {Path(p): text for p, text in document.render_files().items()}
    else:
        outputs = {target: document.render()}

    written = []
    for file_path, text in outputs.items():
        try:
            atomic_write(file_path, text)
        except OSError as e:
            raise DocumentWriteError(str(file_path), f"Could not write document ({e})") from e
        written.append(file_path)

    logger.info("document_saved", path=str(target), files=len(written))
    return written
