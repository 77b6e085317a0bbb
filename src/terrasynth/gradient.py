"""Seeded permutation table used to hash lattice points to gradients."""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

TABLE_SIZE = 256
TABLE_MASK = TABLE_SIZE - 1

# 32-bit LCG driving the shuffle (Numerical Recipes constants)
_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223
_LCG_MODULUS_MASK = 0xFFFFFFFF

# Ken Perlin's reference permutation from "Improving Noise" (2002)
REFERENCE_PERMUTATION = (
    151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225,
    140, 36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148,
    247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32,
    57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175,
    74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122,
    60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54,
    65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89, 18, 169,
    200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
    52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212,
    207, 206, 59, 227, 47, 16, 58, 17, 182, 189, 28, 42, 223, 183, 170, 213,
    119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
    129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104,
    218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12, 191, 179, 162, 241,
    81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157,
    184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93,
    222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
)


@dataclass(frozen=True)
class GradientTable:
    """Immutable doubled permutation of 0..255.

    The 256-entry permutation is stored twice back to back so that corner
    lookups of the form ``table[i + 1]`` and ``table[table[i] + j + 1]`` stay
    in range without a modulo. The backing array is read-only and may be
    shared by any number of concurrent noise evaluations.

    Use ``GradientTable.build(seed)`` or ``GradientTable.reference()`` rather
    than constructing directly.
    """

    table: NDArray[np.int64]
    seed: int | None = field(default=None)

    def __post_init__(self) -> None:
        # Own a private copy so no outside view can mutate the table
        table = np.array(self.table, dtype=np.int64)
        if table.shape != (2 * TABLE_SIZE,):
            raise ValueError(
                f"gradient table must have {2 * TABLE_SIZE} entries, "
                f"got shape {table.shape}"
            )
        if not np.array_equal(np.sort(table[:TABLE_SIZE]), np.arange(TABLE_SIZE)):
            raise ValueError("first half of gradient table is not a permutation of 0..255")
        if not np.array_equal(table[:TABLE_SIZE], table[TABLE_SIZE:]):
            raise ValueError("second half of gradient table must repeat the first")
        table.flags.writeable = False
        object.__setattr__(self, "table", table)

    @classmethod
    def build(cls, seed: int) -> "GradientTable":
        """Build the table for a seed with a Fisher-Yates shuffle.

        Any integer is a valid seed; it is reduced to 32 bits, so seeds that
        agree modulo 2**32 share a table.

        Args:
            seed: Integer seed.

        Returns:
            GradientTable whose first half is a permutation of 0..255.
        """
        perm = list(range(TABLE_SIZE))
        state = seed & _LCG_MODULUS_MASK
        for i in range(TABLE_SIZE - 1, 0, -1):
            state = (state * _LCG_MULTIPLIER + _LCG_INCREMENT) & _LCG_MODULUS_MASK
            j = state % (i + 1)
            perm[i], perm[j] = perm[j], perm[i]
        return cls(table=_doubled(perm), seed=seed)

    @classmethod
    def reference(cls) -> "GradientTable":
        """Ken Perlin's fixed reference table, independent of any seed."""
        return cls(table=_doubled(REFERENCE_PERMUTATION), seed=None)

    @property
    def permutation(self) -> NDArray[np.int64]:
        """The underlying 256-entry permutation (read-only view)."""
        return self.table[:TABLE_SIZE]

    def hash(self, index: int) -> int:
        """Look up a lattice index, masking it into the table's range."""
        return int(self.table[index & TABLE_MASK])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GradientTable):
            return NotImplemented
        return np.array_equal(self.table, other.table)

    def __hash__(self) -> int:
        return hash(self.table.tobytes())


def _doubled(perm) -> NDArray[np.int64]:
    values = np.asarray(perm, dtype=np.int64)
    return np.concatenate([values, values])
