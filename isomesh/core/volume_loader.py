"""
Volume File Loader

Handles loading of plain-text volume files into a ScalarField.

File format: the first whitespace-separated token is the integer grid size N,
followed by N**3 floating-point samples with i as the outer index, then j,
then k as the inner index. There is no other header.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, TextIO

import numpy as np

from isomesh.core.scalar_field import ScalarField

logger = logging.getLogger(__name__)


class VolumeError(Exception):
    """Base class for volume loading errors."""


class VolumeFileNotFoundError(VolumeError):
    """The volume file could not be opened."""


class MalformedVolumeError(VolumeError):
    """Declared size and data do not match, or the size cannot form a voxel."""


class LoadErrorKind(Enum):
    """Failure categories reported in a VolumeLoadResult."""
    NONE = "none"
    FILE_NOT_FOUND = "file not found"
    MALFORMED_VOLUME = "malformed volume"


@dataclass
class VolumeLoadResult:
    """Result of volume file loading operation."""
    field: Optional[ScalarField]
    file_path: str
    file_name: str
    file_size_bytes: int
    success: bool
    error_kind: LoadErrorKind = LoadErrorKind.NONE
    error_message: Optional[str] = None
    load_time_ms: float = 0.0
    # Filled in by the session once the surface has been extracted
    triangle_count: int = 0


def parse_volume(stream: TextIO) -> ScalarField:
    """
    Parse a volume from a text stream.

    Args:
        stream: Readable text stream positioned at the size token

    Returns:
        The parsed ScalarField

    Raises:
        MalformedVolumeError: if the header or sample data is invalid
    """
    tokens = stream.read().split()
    if not tokens:
        raise MalformedVolumeError("Volume is empty")

    try:
        size = int(tokens[0])
    except ValueError:
        raise MalformedVolumeError(f"Invalid grid size token: {tokens[0]!r}") from None

    if size <= 1:
        raise MalformedVolumeError(f"Grid size must be greater than 1, got {size}")

    expected = size ** 3
    available = len(tokens) - 1
    if available < expected:
        raise MalformedVolumeError(
            f"Volume declares N={size} ({expected} samples) but only {available} values are present"
        )
    if available > expected:
        logger.warning(f"Ignoring {available - expected} trailing tokens after {expected} samples")

    try:
        values = np.array(tokens[1:1 + expected], dtype=np.float64)
    except ValueError as e:
        raise MalformedVolumeError(f"Non-numeric sample value: {e}") from None

    if not np.all(np.isfinite(values)):
        bad = int(np.count_nonzero(~np.isfinite(values)))
        raise MalformedVolumeError(f"Volume contains {bad} non-finite samples")

    return ScalarField(size, values)


def read_volume(file_path: str) -> ScalarField:
    """
    Open and parse a volume file.

    Raises:
        VolumeFileNotFoundError: if the file cannot be opened
        MalformedVolumeError: if the contents are invalid
    """
    path = Path(file_path)
    if not path.is_file():
        raise VolumeFileNotFoundError(f"File does not exist: {file_path}")

    try:
        with open(path, 'r') as stream:
            return parse_volume(stream)
    except UnicodeDecodeError as e:
        raise MalformedVolumeError(f"Volume is not a text file: {e}") from None
    except OSError as e:
        raise VolumeFileNotFoundError(f"Cannot open {file_path}: {e}") from None


class VolumeLoader:
    """
    Volume file loader.

    Never raises for file or parse problems; failures are reported through
    the returned VolumeLoadResult.
    """

    def __init__(self):
        self._last_result: Optional[VolumeLoadResult] = None

    @property
    def last_result(self) -> Optional[VolumeLoadResult]:
        """Get the result of the last load operation."""
        return self._last_result

    def load(self, file_path: str) -> VolumeLoadResult:
        """
        Load a volume file.

        Args:
            file_path: Path to the volume file

        Returns:
            VolumeLoadResult containing the field or error information
        """
        start_time = time.perf_counter()

        path = Path(file_path)
        file_name = path.name
        field = None
        error_kind = LoadErrorKind.NONE
        error_message = None

        try:
            field = read_volume(file_path)
        except VolumeFileNotFoundError as e:
            error_kind = LoadErrorKind.FILE_NOT_FOUND
            error_message = str(e)
        except MalformedVolumeError as e:
            error_kind = LoadErrorKind.MALFORMED_VOLUME
            error_message = str(e)

        load_time = (time.perf_counter() - start_time) * 1000

        if field is None:
            logger.error(f"Failed to load volume {file_name}: {error_message}")
        else:
            logger.info(
                f"Loaded volume {file_name}: N={field.size}, "
                f"range [{field.min_value:.4g}, {field.max_value:.4g}] ({load_time:.0f}ms)"
            )

        self._last_result = VolumeLoadResult(
            field=field,
            file_path=str(path.absolute()),
            file_name=file_name,
            file_size_bytes=path.stat().st_size if path.is_file() else 0,
            success=field is not None,
            error_kind=error_kind,
            error_message=error_message,
            load_time_ms=load_time
        )
        return self._last_result


def load_volume_file(file_path: str) -> VolumeLoadResult:
    """
    Convenience function to load a volume file.

    Args:
        file_path: Path to the volume file

    Returns:
        VolumeLoadResult containing the field or error information
    """
    loader = VolumeLoader()
    return loader.load(file_path)
