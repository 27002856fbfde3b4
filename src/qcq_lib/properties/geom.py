# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Molecular geometries passed to program inputs.

A geometry is either a list of Cartesian atoms or a free-form Z-matrix.
Z-matrices may contain parameter assignments (`R=1.1`) after the connectivity
lines; programs that need to separate these use `Geom.zmatParts`.
"""

from dataclasses import dataclass
from typing import Self

from qcq_lib.core.error import QCQError


@dataclass(frozen=True)
class Atom:
    """
    A single atom with Cartesian coordinates in angstrom.
    """

    label: str
    x: float
    y: float
    z: float

    def __str__(self) -> str:
        return f"{self.label:<2} {self.x:15.10f} {self.y:15.10f} {self.z:15.10f}"

    @classmethod
    def fromLine(cls, line: str) -> Self | None:
        """
        Parse a line of the form `label x y z`.

        Returns:
            Atom | None: The parsed atom or None if the line does not have this form.
        """
        fields = line.split()
        if len(fields) != 4:
            return None

        try:
            x, y, z = (float(v) for v in fields[1:])
        except ValueError:
            return None

        return cls(fields[0], x, y, z)


@dataclass(frozen=True)
class Geom:
    """
    Geometry of a molecule: exactly one of `xyz` and `zmat` is set.
    """

    xyz: tuple[Atom, ...] | None = None
    zmat: str | None = None

    def __post_init__(self):
        if (self.xyz is None) == (self.zmat is None):
            raise QCQError("Geometry must be either Cartesian or a Z-matrix.")

    @classmethod
    def fromStr(cls, text: str) -> Self:
        """
        Build a geometry from text.

        The text is treated as Cartesian if every non-empty line has the form
        `label x y z`, otherwise it is treated as a Z-matrix.

        Raises:
            QCQError: If the text is empty.
        """
        lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
        if not lines:
            raise QCQError("Geometry is empty.")

        atoms = [Atom.fromLine(line) for line in lines]
        if all(atom is not None for atom in atoms):
            return cls(xyz=tuple(atoms))  # ty: ignore[invalid-argument-type]

        return cls(zmat="\n".join(lines))

    def isZmat(self) -> bool:
        return self.zmat is not None

    def zmatParts(self) -> tuple[str, str]:
        """
        Split a Z-matrix into the connectivity block and the parameter block.

        The parameter block starts at the first line containing '='.

        Raises:
            QCQError: If the geometry is Cartesian.
        """
        if self.zmat is None:
            raise QCQError("Cartesian geometry has no Z-matrix parts.")

        lines = self.zmat.splitlines()
        for i, line in enumerate(lines):
            if "=" in line:
                return "\n".join(lines[:i]), "\n".join(lines[i:])

        return self.zmat, ""

    def __str__(self) -> str:
        if self.xyz is not None:
            return "\n".join(str(atom) for atom in self.xyz)
        return self.zmat or ""
