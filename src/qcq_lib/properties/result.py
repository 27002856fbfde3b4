# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass

from qcq_lib.properties.geom import Atom


@dataclass(frozen=True)
class JobResult:
    """
    Result of a successfully finished job.

    Attributes:
        energy (float): Final energy in hartree.
        cart (tuple[Atom, ...] | None): Final Cartesian geometry, if the program reported one.
        time (float | None): Wall time in seconds reported by the program.
    """

    energy: float
    cart: tuple[Atom, ...] | None = None
    time: float | None = None

    def toDict(self) -> dict[str, object]:
        """Return the result as a dictionary of plain values."""
        data: dict[str, object] = {"energy": self.energy}
        if self.time is not None:
            data["time"] = self.time
        if self.cart is not None:
            data["cart"] = [
                [atom.label, atom.x, atom.y, atom.z] for atom in self.cart
            ]
        return data
