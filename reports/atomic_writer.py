"""
Crash-safe output files.
Content goes to a temp file in the target directory, is fsynced, then
renamed over the destination, so readers see the old file or the new one.
"""

import os
import json
import time
import tempfile
from pathlib import Path
from typing import Dict, Any, Union

PathLike = Union[str, Path]


class AtomicWriteError(Exception):
    """Raised when an output file cannot be written."""
    pass


def _replace_atomically(payload: bytes, target: Path) -> None:
    """Write payload beside target and rename it into place."""
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, staging_name = tempfile.mkstemp(
            dir=target.parent,
            prefix=f'{target.name}.',
            suffix='.tmp'
        )
    except OSError as e:
        raise AtomicWriteError(f"Failed to create temp file for {target}: {e}") from e

    staging = Path(staging_name)
    try:
        with os.fdopen(fd, 'wb') as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(staging, target)
    except OSError as e:
        staging.unlink(missing_ok=True)
        raise AtomicWriteError(f"Failed to write {target}: {e}") from e


def write_text_atomic(content: str, output_path: PathLike) -> Dict[str, Any]:
    """
    Write text (UTF-8) to output_path without ever leaving a partial file.

    Missing parent directories are created.

    Args:
        content: Text to write
        output_path: Destination file

    Returns:
        Dictionary with status, output_path, bytes_written, duration_seconds

    Raises:
        AtomicWriteError: If any filesystem step fails
    """
    started = time.time()
    target = Path(output_path)
    payload = content.encode('utf-8')

    _replace_atomically(payload, target)

    return {
        'status': 'completed',
        'output_path': str(target),
        'bytes_written': len(payload),
        'duration_seconds': time.time() - started
    }


def write_json_atomic(data: Dict[str, Any], output_path: PathLike) -> Dict[str, Any]:
    """
    Serialize data as indented JSON and write it atomically.

    Dates and other non-JSON values are written with str(). NaN and
    infinity are rejected so the output stays strict JSON.
    """
    try:
        content = json.dumps(data, indent=2, default=str, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise AtomicWriteError(f"Failed to serialize JSON for {output_path}: {e}") from e

    return write_text_atomic(content, output_path)
