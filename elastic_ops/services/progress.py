from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

One bar per ``import-dir`` run, one tick per manifest file. In non-TTY
environments (CI, redirected output) no bar is created, so log output stays
free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """File-level progress bar for the batch import."""

    def __init__(self, total_files: int, *, description: str = "Importing") -> None:
        """
        Args:
            total_files: Number of manifest files to process
            description: Bar label
        """
        self.total_files = total_files
        self.description = description
        self.current_file = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_file(self, file_path: Path) -> None:
        self.current_file += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self) -> None:
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
