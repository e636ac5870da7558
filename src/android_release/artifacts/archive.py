"""In-memory zip packaging for native debug symbol directories."""

import io
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile


def zip_directory(directory: Path) -> bytes:
    """
    Zip every file under directory, with paths relative to it.

    Returns:
        The archive bytes
    """
    buffer = io.BytesIO()
    with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
        for path in sorted(directory.rglob("*")):
            if path.is_file():
                archive.write(path, arcname=path.relative_to(directory).as_posix())
    return buffer.getvalue()


def read_debug_symbols(path: Path) -> bytes:
    """Return debug symbols as bytes, zipping directories first."""
    if path.is_dir():
        return zip_directory(path)
    return path.read_bytes()
