"""Open downloaded images in the first available viewer."""

import subprocess
from pathlib import Path
from typing import Sequence

from foretell.core.logging import get_logger
from foretell.errors import ViewerError

logger = get_logger(__name__)


def viewer_command(binary: str, files: Sequence[Path], geometry: str = "590x800") -> list[str]:
    args = [binary]
    if "sxiv" in binary:
        args += ["-b", "-g", geometry]
    return args + [str(path) for path in files]


def launch_viewer(
    files: Sequence[Path],
    viewers: Sequence[str] = ("sxiv", "nsxiv", "xdg-open"),
    geometry: str = "590x800",
) -> bool:
    """Show ``files`` with the first installed viewer and wait for it to close.

    Returns:
        False when none of ``viewers`` is installed

    Raises:
        ViewerError: The viewer failed to start or exited with an error
    """
    for binary in viewers:
        try:
            process = subprocess.Popen(viewer_command(binary, files, geometry))
        except FileNotFoundError:
            logger.debug("{} is not installed", binary)
            continue
        except OSError as exc:
            raise ViewerError(f"starting {binary}: {exc}") from exc

        status = process.wait()
        if status != 0:
            raise ViewerError(f"image viewer error: {binary} exited with {status}")
        return True

    logger.warning("No image viewer found among {}", ", ".join(viewers))
    return False
