# orbit.py
"""
Keplerian orbital elements and their conversion to Cartesian state vectors.

An `Orbit` is an immutable parameter set: six classical elements relative to a
reference epoch. It owns no simulation state; a central `Gravitator` supplies
the standard gravitational parameter on each query, and the resulting
position/velocity are expressed in the central body's frame (the inertial
frame whenever the central body sits at the origin, as in every scenario).

Conversion follows https://farside.ph.utexas.edu/teaching/celestial/Celestial/node34.html:
mean anomaly -> eccentric anomaly (Newton-Raphson on Kepler's equation) ->
true anomaly and radius -> perifocal coordinates -> 3-1-3 rotation into the
inertial frame.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

import numpy as np

from config import config
from physics_utils import PhysicsError, as_float32_vector, perifocal_to_inertial
from position import Position

TWO_PI = 2 * np.pi


def solve_kepler(mean_anomaly: float, eccentricity: float, iterations: int = None) -> float:
    """
    Solves Kepler's Equation M = E - e * sin(E) for eccentric anomaly E using Newton-Raphson.

    The iteration is seeded with E = M and runs a fixed number of times with no
    convergence test. Twenty iterations reach double precision for e <= 0.9
    over any M; above that, Newton from E = M can overshoot for small |M| and
    the residual degrades.

    Args:
        mean_anomaly: Mean anomaly in radians. Not reduced modulo 2*pi.
        eccentricity: Eccentricity (0 <= e < 1).
        iterations: Number of Newton-Raphson steps. Defaults to `config.Kepler.ITERATIONS`.

    Returns:
        Eccentric anomaly E in radians.
    """
    if iterations is None:
        iterations = config.Kepler.ITERATIONS

    eccentric_anomaly = float(mean_anomaly)
    for _ in range(iterations):
        f_E = eccentric_anomaly - eccentricity * np.sin(eccentric_anomaly) - mean_anomaly
        f_prime_E = 1 - eccentricity * np.cos(eccentric_anomaly)
        eccentric_anomaly -= float(f_E / f_prime_E)

    if config.Debug.KEPLER_SOLVER:
        residual = eccentric_anomaly - eccentricity * np.sin(eccentric_anomaly) - mean_anomaly
        logging.debug(f"Kepler solve: M={mean_anomaly}, e={eccentricity}, E={eccentric_anomaly}, residual={residual}")
    return eccentric_anomaly


@dataclass(frozen=True)
class Orbit:
    """
    An orbit defined by the six Keplerian elements (https://en.wikipedia.org/wiki/Orbital_elements).

    Attributes:
        eccentricity: e, 0 <= e < 1.
        semimajor_axis: a in metres, > 0.
        inclination: i in radians.
        longitude_of_ascending_node: Ω in radians.
        argument_of_periapsis: ω in radians.
        mean_anomaly_at_epoch: M0 in radians.
        reference_epoch: The time at which the mean anomaly equals M0.
    """
    eccentricity: float
    semimajor_axis: float
    inclination: float
    longitude_of_ascending_node: float
    argument_of_periapsis: float
    mean_anomaly_at_epoch: float
    reference_epoch: datetime

    def __post_init__(self):
        if not (0 <= self.eccentricity < 1):
            raise PhysicsError(f"Eccentricity e={self.eccentricity} is out of bounds [0, 1) for an elliptical orbit.")
        if self.semimajor_axis <= 0:
            raise PhysicsError(f"Semi-major axis a={self.semimajor_axis} must be positive.")

    @classmethod
    def from_degrees(cls, eccentricity, semimajor_axis, inclination_deg, longitude_of_ascending_node_deg,
                     argument_of_periapsis_deg, mean_anomaly_at_epoch_deg, reference_epoch):
        """Builds an Orbit from angles given in degrees."""
        return cls(
            eccentricity=float(eccentricity),
            semimajor_axis=float(semimajor_axis),
            inclination=float(np.radians(inclination_deg)),
            longitude_of_ascending_node=float(np.radians(longitude_of_ascending_node_deg)),
            argument_of_periapsis=float(np.radians(argument_of_periapsis_deg)),
            mean_anomaly_at_epoch=float(np.radians(mean_anomaly_at_epoch_deg)),
            reference_epoch=reference_epoch,
        )

    @classmethod
    def from_state_vectors(cls, position, velocity, central_body, epoch: datetime) -> 'Orbit':
        """
        Recovers the Keplerian elements of an elliptical orbit from a state vector.

        Args:
            position (Position or Sequence[float]): Position relative to the central body (m).
            velocity (Sequence[float]): Velocity relative to the central body (m/s).
            central_body (Gravitator): Supplies mu.
            epoch: Time of the state; becomes the reference epoch.

        Returns:
            Orbit whose mean anomaly at epoch reproduces the given state.

        Notes:
            For an equatorial orbit the node is undefined and Ω is set to 0; for a
            circular orbit periapsis is undefined and ω is set to 0, so the anomaly
            is measured from the in-plane reference direction (cos Ω, -sin Ω, 0),
            which is the x-axis when both are undefined.

        Raises:
            PhysicsError: If the state is not an elliptical orbit (e >= 1), has zero
                angular momentum, or mu is not positive.
        """
        mu = _gravitational_parameter(central_body)
        r_vec = position.icrs_vector if isinstance(position, Position) else np.asarray(position, dtype=np.float64)
        v_vec = np.asarray(velocity, dtype=np.float64)

        r_mag = np.linalg.norm(r_vec)
        if r_mag == 0:
            raise PhysicsError("Cannot derive orbital elements at zero radius.")
        r_dir = r_vec / r_mag

        # Angular momentum and eccentricity vectors
        h_vec = np.cross(r_vec, v_vec)
        h_mag = np.linalg.norm(h_vec)
        if h_mag <= 1e-12 * r_mag * max(np.linalg.norm(v_vec), 1.0):
            raise PhysicsError("Rectilinear state (zero angular momentum) has no elliptical elements.")
        h_dir = h_vec / h_mag
        e_vec = np.cross(v_vec, h_vec) / mu - r_dir
        e_mag = float(np.linalg.norm(e_vec))

        a_inv = 2.0 / r_mag - np.dot(v_vec, v_vec) / mu
        if a_inv <= 0 or e_mag >= 1.0:
            raise PhysicsError(f"State is not elliptical (e={e_mag}); only closed orbits are supported.")
        semimajor_axis = 1.0 / a_inv

        # normal = (sin i sin Ω, sin i cos Ω, cos i), see perifocal_to_inertial
        inclination = float(np.arccos(np.clip(h_dir[2], -1.0, 1.0)))

        tolerance = 1e-11
        if np.hypot(h_vec[0], h_vec[1]) > tolerance * h_mag:
            longitude_of_ascending_node = float(np.arctan2(h_vec[0], h_vec[1]))
        else:
            longitude_of_ascending_node = 0.0
        reference_dir = np.array([np.cos(longitude_of_ascending_node), -np.sin(longitude_of_ascending_node), 0.0])

        # the body sits at angle (true anomaly - ω) from reference_dir
        if e_mag > tolerance:
            e_dir = e_vec / e_mag
            argument_of_periapsis = -_angle_in_plane(reference_dir, e_dir, h_dir)
            true_anomaly = _angle_in_plane(e_dir, r_dir, h_dir)
        else:
            e_mag = 0.0
            argument_of_periapsis = 0.0
            true_anomaly = _angle_in_plane(reference_dir, r_dir, h_dir)

        eccentric_anomaly = 2 * np.arctan2(
            np.sqrt(1 - e_mag) * np.sin(true_anomaly / 2),
            np.sqrt(1 + e_mag) * np.cos(true_anomaly / 2),
        )
        mean_anomaly = eccentric_anomaly - e_mag * np.sin(eccentric_anomaly)

        return cls(
            eccentricity=e_mag,
            semimajor_axis=float(semimajor_axis),
            inclination=inclination,
            longitude_of_ascending_node=float(longitude_of_ascending_node % TWO_PI),
            argument_of_periapsis=float(argument_of_periapsis % TWO_PI),
            mean_anomaly_at_epoch=float(mean_anomaly % TWO_PI),
            reference_epoch=epoch,
        )

    def mean_motion(self, central_body) -> float:
        """n = sqrt(mu / a^3) in rad/s."""
        return float(np.sqrt(_gravitational_parameter(central_body) / self.semimajor_axis ** 3))

    def period(self, central_body) -> float:
        """Orbital period in seconds."""
        return TWO_PI / self.mean_motion(central_body)

    def mean_anomaly_at(self, central_body, time: datetime) -> float:
        """M = M0 + n * (t - epoch), not wrapped to [0, 2*pi)."""
        time_from_epoch = (time - self.reference_epoch).total_seconds()
        return self.mean_anomaly_at_epoch + time_from_epoch * self.mean_motion(central_body)

    def eccentric_anomaly_at(self, central_body, time: datetime) -> float:
        return solve_kepler(self.mean_anomaly_at(central_body, time), self.eccentricity)

    def position_from_gravitator(self, central_body, time: datetime) -> Position:
        """Position of the orbiting body at `time`."""
        return self._state_at(central_body, time)[0]

    def velocity_from_gravitator(self, central_body, time: datetime) -> np.ndarray:
        """Velocity of the orbiting body at `time`, as a float32 vector (m/s)."""
        return self._state_at(central_body, time)[1]

    def state_from_gravitator(self, central_body, time: datetime):
        """(Position, float32 velocity) at `time` from a single Kepler solve."""
        return self._state_at(central_body, time)

    def _state_at(self, central_body, time):
        mu = _gravitational_parameter(central_body)
        e = self.eccentricity
        a = self.semimajor_axis

        eccentric_anomaly = self.eccentric_anomaly_at(central_body, time)
        cos_E = np.cos(eccentric_anomaly)
        sin_E = np.sin(eccentric_anomaly)
        true_anomaly = 2 * np.arctan2(
            np.sqrt(1 + e) * np.sin(eccentric_anomaly / 2),
            np.sqrt(1 - e) * np.cos(eccentric_anomaly / 2),
        )
        distance_to_central_body = a * (1 - e * cos_E)

        # z-axis perpendicular to orbital plane, x-axis pointing to periapsis
        orbital_frame_position = np.array([
            distance_to_central_body * np.cos(true_anomaly),
            distance_to_central_body * np.sin(true_anomaly),
            0.0,
        ])
        orbital_frame_velocity = np.array([
            -sin_E,
            np.sqrt(1 - e * e) * cos_E,
            0.0,
        ]) * np.sqrt(mu * a) / distance_to_central_body

        rotation = perifocal_to_inertial(self.inclination, self.longitude_of_ascending_node,
                                         self.argument_of_periapsis)
        position = Position(rotation @ orbital_frame_position)
        velocity = as_float32_vector(rotation @ orbital_frame_velocity)
        return position, velocity


def _gravitational_parameter(central_body) -> float:
    mu = float(central_body.standard_gravitational_parameter)
    if mu <= 0:
        raise PhysicsError(f"Standard gravitational parameter mu={mu} must be positive.")
    return mu


def _angle_in_plane(from_dir, to_dir, normal):
    """Signed angle from `from_dir` to `to_dir` about `normal`, in radians."""
    return float(np.arctan2(np.dot(np.cross(from_dir, to_dir), normal), np.dot(from_dir, to_dir)))
