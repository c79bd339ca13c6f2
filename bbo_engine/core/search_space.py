"""
Axis-aligned search spaces (boxes) in R^n.
"""

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import ConfigurationError


class SearchSpace:
    """
    Box-shaped search space, one (min, max) range per dimension.

    Bounds are validated at construction and never change afterwards.
    """

    def __init__(self, ranges: Sequence[Tuple[float, float]]):
        """
        Initialize search space.

        Args:
            ranges: Sequence of (min, max) pairs, one per dimension

        Raises:
            ConfigurationError: If any dimension has min > max
        """
        ranges = [(float(lo), float(hi)) for lo, hi in ranges]
        for i, (lo, hi) in enumerate(ranges):
            if lo > hi:
                raise ConfigurationError(
                    f"Invalid range for dimension {i}: min {lo} is larger than max {hi}"
                )

        self._mins = np.array([lo for lo, _ in ranges], dtype=float)
        self._maxs = np.array([hi for _, hi in ranges], dtype=float)
        self._deltas = self._maxs - self._mins
        for arr in (self._mins, self._maxs, self._deltas):
            arr.setflags(write=False)

    @classmethod
    def symmetric(cls, numdims: int, range_: Tuple[float, float] = (0.0, 1.0)) -> "SearchSpace":
        """Search space with the same range in every dimension."""
        return cls([range_] * numdims)

    @property
    def numdims(self) -> int:
        return len(self._mins)

    def __len__(self) -> int:
        return self.numdims

    def __repr__(self) -> str:
        return f"SearchSpace({self.dim_range()})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, SearchSpace):
            return NotImplemented
        return (
            np.array_equal(self._mins, other._mins)
            and np.array_equal(self._maxs, other._maxs)
        )

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    def dim_min(self, i: Optional[int] = None) -> Union[float, np.ndarray]:
        """Lower bound of dimension i, or of all dimensions."""
        return self._mins if i is None else float(self._mins[i])

    def dim_max(self, i: Optional[int] = None) -> Union[float, np.ndarray]:
        """Upper bound of dimension i, or of all dimensions."""
        return self._maxs if i is None else float(self._maxs[i])

    def dim_delta(self, i: Optional[int] = None) -> Union[float, np.ndarray]:
        """Diameter (max - min) of dimension i, or of all dimensions."""
        return self._deltas if i is None else float(self._deltas[i])

    def dim_range(self, i: Optional[int] = None) -> Union[Tuple[float, float], List[Tuple[float, float]]]:
        """(min, max) pair of dimension i, or the list of pairs of all dimensions."""
        if i is not None:
            return (float(self._mins[i]), float(self._maxs[i]))
        return [(float(lo), float(hi)) for lo, hi in zip(self._mins, self._maxs)]

    # ------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------

    def random_individual(self, rng: np.random.Generator) -> np.ndarray:
        """Draw one point uniformly from the box."""
        return self._mins + self._deltas * rng.random(self.numdims)

    def random_individuals(self, k: int, rng: np.random.Generator) -> np.ndarray:
        """
        Draw k independent points uniformly from the box.

        Returns:
            Array of shape (k, numdims), one individual per row
        """
        return self._mins + self._deltas * rng.random((k, self.numdims))

    def random_individuals_lhs(self, k: int, rng: np.random.Generator) -> np.ndarray:
        """
        Latin hypercube sample of k points.

        Each dimension is split into k equal intervals and every interval
        receives exactly one point; which point lands in which interval is
        permuted independently per dimension.

        Returns:
            Array of shape (k, numdims), one individual per row
        """
        n = self.numdims
        intervals = np.column_stack([rng.permutation(k) for _ in range(n)]) if n > 0 else np.empty((k, 0))
        offsets = (intervals + rng.random((k, n))) / k
        return self._mins + self._deltas * offsets

    # ------------------------------------------------------------
    # Membership and projection
    # ------------------------------------------------------------

    def feasible(self, x: Sequence[float]) -> np.ndarray:
        """Project x into the box by clamping every coordinate to its range."""
        return np.clip(np.asarray(x, dtype=float), self._mins, self._maxs)

    def contains(self, x: Sequence[float]) -> bool:
        x = np.asarray(x, dtype=float)
        if x.shape != self._mins.shape:
            return False
        return bool(np.all((self._mins <= x) & (x <= self._maxs)))

    def __contains__(self, x) -> bool:
        return self.contains(x)

    def __add__(self, other: "SearchSpace") -> "SearchSpace":
        return concatenate(self, other)


def concatenate(ss1: SearchSpace, ss2: SearchSpace) -> SearchSpace:
    """Search space with the dimensions of ss1 followed by those of ss2."""
    return SearchSpace(ss1.dim_range() + ss2.dim_range())
