"""Card name picker (dmenu and compatible programs)."""

import subprocess
from typing import Iterable, Optional

from foretell.errors import PickerError


def picker_args(command: str = "dmenu", prompt: str = "scry", lines: int = 30) -> list[str]:
    return [command, "-p", prompt, "-l", str(lines), "-i"]


def pick_card(names: Iterable[str], args: Optional[list[str]] = None) -> str:
    """Offer ``names`` in the picker and return the chosen (or typed) text.

    Returns:
        The selection without surrounding whitespace; empty if nothing was chosen

    Raises:
        PickerError: The picker could not run, was killed or failed
    """
    args = args or picker_args()
    payload = "".join(f"{name}\n" for name in names)
    try:
        completed = subprocess.run(
            args, input=payload, capture_output=True, text=True, check=False
        )
    except OSError as exc:
        raise PickerError(f"running {args[0]}: {exc}") from exc

    if completed.returncode == 0:
        return completed.stdout.strip()
    if completed.returncode < 0:
        raise PickerError(f"killed by signal: {-completed.returncode}")
    raise PickerError(f"process exited with status: {completed.returncode}")
