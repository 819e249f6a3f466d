# cath/utils/file.py
import os
import logging
import tempfile
from contextlib import contextmanager
from typing import Optional, Any, Generator

from cath.exceptions import FileOperationError

logger = logging.getLogger("cath.file_utils")


@contextmanager
def safe_open(file_path: str, mode: str = 'r', encoding: Optional[str] = None) -> Generator[Any, None, None]:
    """Safely open a file with error handling

    Args:
        file_path: Path to the file
        mode: File open mode
        encoding: File encoding

    Yields:
        Open file object

    Raises:
        FileOperationError: If file cannot be opened
    """
    try:
        logger.debug(f"Opening file: {file_path} (mode: {mode})")
        file = open(file_path, mode, encoding=encoding) if encoding else open(file_path, mode)
    except OSError as e:
        error_msg = f"Error accessing file {file_path}: {str(e)}"
        logger.error(error_msg)
        raise FileOperationError(error_msg, {'path': str(file_path)}) from e

    try:
        yield file
    finally:
        file.close()


@contextmanager
def atomic_write(file_path: str, mode: str = 'wb') -> Generator[Any, None, None]:
    """Write to a file atomically using a temporary file

    The temporary file lives in the target directory and is renamed over the
    target only after the block completes without error.

    Args:
        file_path: Path to the file
        mode: File open mode (must be a write mode)

    Yields:
        Open temporary file object

    Raises:
        FileOperationError: If file operation fails
    """
    if 'w' not in mode:
        raise ValueError(f"Invalid mode for atomic_write: {mode} (must be write mode)")

    base_dir = os.path.dirname(file_path) or '.'
    try:
        os.makedirs(base_dir, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=base_dir, suffix='.tmp')
    except OSError as e:
        error_msg = f"Error during atomic write to {file_path}: {str(e)}"
        logger.error(error_msg)
        raise FileOperationError(error_msg, {'path': str(file_path)}) from e

    try:
        with os.fdopen(fd, mode) as temp_file:
            yield temp_file
        os.replace(temp_path, file_path)
        logger.debug(f"Atomically wrote to file: {file_path}")
    except OSError as e:
        _discard_temp(temp_path)
        error_msg = f"Error during atomic write to {file_path}: {str(e)}"
        logger.error(error_msg)
        raise FileOperationError(error_msg, {'path': str(file_path)}) from e
    except BaseException:
        _discard_temp(temp_path)
        raise


def _discard_temp(temp_path: str) -> None:
    if os.path.exists(temp_path):
        os.unlink(temp_path)
        logger.debug(f"Deleted temporary file: {temp_path} after error")


def ensure_dir(directory: str) -> bool:
    """Ensure a directory exists

    Raises:
        FileOperationError: If directory cannot be created
    """
    try:
        os.makedirs(directory, exist_ok=True)
        return True
    except OSError as e:
        error_msg = f"Error creating directory {directory}: {str(e)}"
        logger.error(error_msg)
        raise FileOperationError(error_msg, {'path': str(directory)}) from e
