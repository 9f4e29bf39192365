"""Content type detection via the ``file`` command.

Takeout keeps whatever extension the uploader used, which is often wrong
(PNG screenshots saved as .jpg, HEIC photos exported as .JPG). The
``file`` command's description of the actual bytes decides the extension
the copy is written with.
"""

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from .errors import ToolNotFoundError, UnknownFileTypeError

logger = logging.getLogger(__name__)


class TypeSniffer(Protocol):
    """Anything that can describe a file's content type."""

    def describe(self, path: Path) -> str:
        ...


class FileCommandSniffer:
    """Describes files with ``file --brief``."""

    def __init__(self, command: str = "file", timeout: int = 60):
        self.command = command
        self.timeout = timeout

    def describe(self, path: Path) -> str:
        """
        Return the content description for a file.

        Raises:
            ToolNotFoundError: If the file command is not installed
            subprocess.CalledProcessError: If the file command fails
            subprocess.TimeoutExpired: If the file command hangs
        """
        try:
            result = subprocess.run(
                [self.command, '--brief', str(path)],
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                check=True,
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(f"Type sniffer '{self.command}' not found", tool=self.command) from e
        except subprocess.CalledProcessError as e:
            logger.error(f"Type sniffer failed: {{'path': {str(path)!r}, 'stderr': {e.stderr!r}}}")
            raise
        except subprocess.TimeoutExpired:
            logger.error(f"Type sniffer timed out: {{'path': {str(path)!r}}}")
            raise

        return result.stdout.strip()


# Ordered: the first matching substring decides the extension
DESCRIPTION_EXTENSIONS = [
    (("png image data",), "png"),
    (("jpg image data", "jpeg image data"), "jpg"),
    (("gif image data",), "gif"),
    (("heic image data", "iso media, heif image hevc main"), "heic"),
    (("mp3 audio",), "mp3"),
    (("apple quicktime movie",), "mov"),
    ((
        "mp4 video",
        "iso media, mp4 v",
        "iso media, mp4 base media v",
        "iso media, mpeg-4",
        "iso media, mpeg v",
    ), "mp4"),
    (("mov video",), "mov"),
    (("3gp video",), "3gp"),
    (("tiff image data",), "tiff"),
    (("pc bitmap",), "bmp"),
    (("apple itunes video (.m4v)",), "m4v"),
    (("web/p image",), "webp"),
    (("microsoft asf",), "asf"),
    (("mpeg sequence",), "mpeg"),
    (("avi",), "avi"),
    (("canon cr2",), "cr2"),
]

# Descriptions under which the original extension is kept
KEEP_ORIGINAL_SUBSTRINGS = ("ascii text", "canon ciff raw image data")
KEEP_ORIGINAL_EXACT = "data"


def extension_for_description(description: str, original_extension: str) -> str:
    """
    Map a ``file`` description to the canonical extension (no dot).

    Args:
        description: Output of the type sniffer
        original_extension: Current extension, returned for opaque data

    Returns:
        Canonical lowercase extension, or original_extension unchanged

    Raises:
        UnknownFileTypeError: If the description matches no known type
    """
    folded = description.casefold()

    for substrings, extension in DESCRIPTION_EXTENSIONS:
        if any(s in folded for s in substrings):
            return extension

    if folded.strip() == KEEP_ORIGINAL_EXACT or any(s in folded for s in KEEP_ORIGINAL_SUBSTRINGS):
        return original_extension

    raise UnknownFileTypeError(f"Unknown file type: {description!r}", description=description)
