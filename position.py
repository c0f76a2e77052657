# position.py
import numpy as np

from physics_utils import as_float32_vector


class Position:
    """
    A specific, unambiguous point in three-dimensional space.

    Coordinates are stored in double precision, in metres, relative to the
    barycentre of the solar system; over the timescales simulated here this is
    an inertial frame. Axes follow the ICRS orientation: the xy plane is
    (approximately) the Earth's equator, +x points to the vernal equinox and
    +z to the north pole (right-handed).

    Velocity and acceleration math is done in single precision, so a Position
    offers a float32 view and a float32 displacement, but accumulates changes
    into its float64 fields. At planetary distances (~1e11 m) a float32
    position could not resolve metre-scale integration steps.
    """

    def __init__(self, vector):
        coordinates = np.array(vector, dtype=np.float64).reshape(-1)
        if coordinates.shape != (3,):
            raise ValueError(f"A Position needs three coordinates, got shape {np.shape(vector)}.")
        self._coordinates = coordinates

    @property
    def x(self) -> float:
        return float(self._coordinates[0])

    @property
    def y(self) -> float:
        return float(self._coordinates[1])

    @property
    def z(self) -> float:
        return float(self._coordinates[2])

    @property
    def icrs_vector_f(self) -> np.ndarray:
        """Single-precision copy, each component narrowed individually."""
        return as_float32_vector(self._coordinates)

    @property
    def icrs_vector(self) -> np.ndarray:
        """Double-precision copy of the coordinates."""
        return self._coordinates.copy()

    def offset_from(self, origin: 'Position') -> np.ndarray:
        """Displacement from `origin` to this position, in single precision."""
        return self.icrs_vector_f - origin.icrs_vector_f

    def change_by(self, position_change) -> None:
        """Moves the position by a single-precision displacement."""
        self._coordinates += as_float32_vector(position_change)

    def copy(self) -> 'Position':
        return Position(self._coordinates)

    def __eq__(self, other):
        if not isinstance(other, Position):
            return NotImplemented
        return bool(np.array_equal(self._coordinates, other._coordinates))

    __hash__ = None

    def __repr__(self):
        return f"Position(x={self.x!r}, y={self.y!r}, z={self.z!r})"
