"""Zip archive creation for bundles.

Entries are sorted and carry a fixed timestamp, so identical contents give
byte-identical archives. The archive is written to a temporary sibling
file and moved into place, so a bundle path either holds a complete
archive or nothing new.
"""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path

logger = logging.getLogger(__name__)

# Maximum deflate compression
ZIP_COMPRESSLEVEL = 9

# Entry timestamp: the zip epoch
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)

# drwxr-xr-x plus the MS-DOS directory flag
DIR_EXTERNAL_ATTR = (0o40755 << 16) | 0x10


def zip_dir(input_dir: Path, output_path: Path) -> Path:
    """Zip a directory with its contents at the archive root.

    Args:
        input_dir: Directory whose contents are archived.
        output_path: Destination zip path; parent directories are created.

    Returns:
        Path to the written archive.

    Raises:
        FileNotFoundError: If input_dir does not exist.
    """
    if not input_dir.is_dir():
        raise FileNotFoundError(f"Directory to archive not found: {input_dir}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    partial_path = output_path.with_name(output_path.name + ".partial")

    count = 0
    try:
        with zipfile.ZipFile(
            partial_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=ZIP_COMPRESSLEVEL,
        ) as archive:
            for path in sorted(input_dir.rglob("*")):
                arcname = path.relative_to(input_dir).as_posix()
                if path.is_dir():
                    info = zipfile.ZipInfo(arcname + "/", date_time=ZIP_DATE_TIME)
                    info.external_attr = DIR_EXTERNAL_ATTR
                    archive.writestr(info, b"")
                    continue
                info = zipfile.ZipInfo.from_file(path, arcname)
                info.date_time = ZIP_DATE_TIME
                info.compress_type = zipfile.ZIP_DEFLATED
                archive.writestr(
                    info, path.read_bytes(), compresslevel=ZIP_COMPRESSLEVEL
                )
                count += 1
        os.replace(partial_path, output_path)
    finally:
        partial_path.unlink(missing_ok=True)

    logger.debug("Archived %d files from %s into %s", count, input_dir, output_path)
    return output_path


__all__ = ["ZIP_COMPRESSLEVEL", "ZIP_DATE_TIME", "zip_dir"]
