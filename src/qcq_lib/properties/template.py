# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass
from pathlib import Path
from typing import Self

from qcq_lib.core.error import QCQError
from qcq_lib.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Template:
    """
    Text with Go-style placeholders such as `{{.geom}}` or `{{.basename}}`.

    Used both for program input files and for the headers of submission scripts.
    """

    header: str

    @classmethod
    def fromFileOrStr(cls, value: str, base_dir: Path | None = None) -> Self:
        """
        Build a template from inline text or from a path to a file.

        A single-line value naming an existing file (absolute, or relative to
        `base_dir`) is read from that file; any other value is used verbatim.

        Raises:
            QCQError: If the file exists but cannot be read.
        """
        if "\n" not in value.strip():
            candidate = Path(value.strip())
            if not candidate.is_absolute() and base_dir is not None:
                candidate = base_dir / candidate

            if candidate.is_file():
                logger.debug(f"Reading template from '{candidate}'.")
                try:
                    return cls(candidate.read_text())
                except OSError as e:
                    raise QCQError(f"Could not read template '{candidate}': {e}.") from e

        return cls(value)

    def render(self, **values: object) -> str:
        """
        Replace every `{{.key}}` placeholder with the corresponding value.

        Placeholders without a value are left untouched.
        """
        body = self.header
        for key, value in values.items():
            body = body.replace(f"{{{{.{key}}}}}", str(value))
        return body
