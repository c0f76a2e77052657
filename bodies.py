# bodies.py
"""
Body capabilities and the concrete bodies the simulation drives.

A body's role is decided by the capability classes it inherits from:
`Gravitator` (exerts gravity), `Gravitatee` (moves under gravity), or both.
The `Simulation` sorts bodies with `isinstance`, so new body kinds only need to
subclass the right capabilities.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple

import numpy as np

from config import config
from physics_utils import as_float32_vector, gravitational_acceleration
from position import Position


def _check_timestep(timestep: timedelta) -> None:
    if timestep < timedelta(0):
        raise ValueError(f"Cannot advance a body by a negative timestep ({timestep}).")


class Body(ABC):
    """Anything with a position and a simulation-local clock."""

    @property
    @abstractmethod
    def position(self) -> Position:
        ...

    @property
    @abstractmethod
    def current_time(self) -> datetime:
        ...

    @abstractmethod
    def advance(self, timestep: timedelta) -> None:
        """Moves the body forward by `timestep`; `current_time` grows by exactly that much."""


class Gravitator(Body):
    """A body that attracts others."""

    @property
    @abstractmethod
    def mass(self) -> float:
        ...

    @property
    def standard_gravitational_parameter(self) -> float:
        """mu = G * mass (m^3/s^2)."""
        return self.mass * config.Physics.GRAVITATIONAL_CONSTANT


class Gravitatee(Body):
    """
    A body whose motion is influenced by gravitators.

    The gravitators are injected by the owning `Simulation` as an immutable
    tuple; it is replaced wholesale whenever the simulation's bodies change.
    """
    _gravitators: Tuple[Gravitator, ...] = ()

    @property
    def gravitators(self) -> Tuple[Gravitator, ...]:
        return self._gravitators

    @gravitators.setter
    def gravitators(self, gravitators: Iterable[Gravitator]) -> None:
        self._gravitators = tuple(gravitators)


class StaticPlanet(Gravitator):
    """A gravitator fixed in space. Advancing it only moves its clock."""

    def __init__(self, initial_time: datetime, position: Position, mass: float):
        self._current_time = initial_time
        self._position = position.copy()
        self._mass = float(mass)

    @property
    def position(self) -> Position:
        """A copy; a static planet never moves."""
        return self._position.copy()

    @property
    def mass(self) -> float:
        return self._mass

    @property
    def current_time(self) -> datetime:
        return self._current_time

    def advance(self, timestep: timedelta) -> None:
        _check_timestep(timestep)
        self._current_time += timestep

    def __repr__(self):
        return f"{type(self).__name__}(time={self._current_time}, position={self._position}, mass={self._mass})"


class OriginEarth(StaticPlanet):
    def __init__(self, initial_time: datetime):
        super().__init__(initial_time, Position(np.zeros(3)), config.SolarSystem.EARTH_MASS_KG)


class OriginSun(StaticPlanet):
    def __init__(self, initial_time: datetime):
        super().__init__(initial_time, Position(np.zeros(3)), config.SolarSystem.SUN_MASS_KG)


class Craft(Gravitatee):
    """
    A massless body integrated forward under the pull of its gravitators.

    Each call to `advance` is split into substeps no longer than
    `minimum_timestep`, each integrated with one semi-implicit Euler step:
    the position moves with the old velocity first, then the velocity picks up
    the acceleration of every gravitator evaluated at the new position.
    Velocities are single precision; positions accumulate in double precision.
    """

    def __init__(self, initial_time: datetime, initial_position: Position, initial_velocity,
                 minimum_timestep: Optional[timedelta] = None):
        if minimum_timestep is None:
            minimum_timestep = timedelta(seconds=config.Physics.CRAFT_MINIMUM_TIMESTEP_SECONDS)
        if minimum_timestep <= timedelta(0):
            raise ValueError(f"Craft minimum timestep must be positive, got {minimum_timestep}.")
        self._current_time = initial_time
        self._position = initial_position.copy()
        self._velocity = as_float32_vector(initial_velocity)
        self._minimum_timestep = minimum_timestep

    @classmethod
    def from_orbit(cls, initial_time: datetime, initial_orbit, initial_central_body: Gravitator,
                   minimum_timestep: Optional[timedelta] = None) -> 'Craft':
        """Seeds position and velocity by sampling `initial_orbit` at `initial_time`."""
        position, velocity = initial_orbit.state_from_gravitator(initial_central_body, initial_time)
        return cls(initial_time, position, velocity, minimum_timestep)

    @property
    def position(self) -> Position:
        return self._position

    @property
    def velocity(self) -> np.ndarray:
        return self._velocity.copy()

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self._velocity))

    @property
    def current_time(self) -> datetime:
        return self._current_time

    @property
    def minimum_timestep(self) -> timedelta:
        return self._minimum_timestep

    def _explicit_euler_step(self, timestep: timedelta) -> None:
        h = np.float32(timestep.total_seconds())

        # update location
        self._position.change_by(h * self._velocity)

        # update velocity
        for gravitator in self.gravitators:
            if gravitator is self:
                continue
            difference = gravitator.position.offset_from(self._position)
            acceleration = gravitational_acceleration(difference, gravitator.standard_gravitational_parameter)
            self._velocity += h * acceleration

        if config.Debug.EULER_INTEGRATION:
            logging.debug(f"Euler step h={h}s: position={self._position}, velocity={self._velocity}")

    def advance(self, timestep: timedelta) -> None:
        _check_timestep(timestep)
        time_simulated = timedelta(0)
        while time_simulated < timestep:
            next_timestep = min(self._minimum_timestep, timestep - time_simulated)
            self._explicit_euler_step(next_timestep)
            time_simulated += next_timestep

        self._current_time += timestep

    def __repr__(self):
        return f"Craft(time={self._current_time}, position={self._position}, velocity={self._velocity})"
