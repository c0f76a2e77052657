# simulation.py
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from bodies import Body, Gravitatee, Gravitator
from config import config, ConfigurationError


class SimulationDesyncError(Exception):
    """Raised when the clocks of a simulation's bodies disagree.

    Attributes:
        bodies (Tuple[Body, ...]): The body collection at the time of the check,
            for diagnosis.
    """

    def __init__(self, message: str, bodies: Iterable[Body] = ()):
        super().__init__(message)
        self.bodies = tuple(bodies)


class Simulation:
    """Keeps a set of bodies time-synchronized while driving them forward.

    The simulation owns its body collection and derives two views from it: the
    gravitators and the gravitatees. Every gravitatee is handed the current
    gravitator tuple, refreshed whenever a body is added.

    After any public method returns, every body reports the same
    `current_time` (the sync invariant).

    Stepping: `update` is the integrator. It pushes substeps of at most
    `minimum_timestep` to every body, advancing all gravitators before any
    other body, so a gravitatee always sees its gravitators' post-substep
    positions regardless of the order bodies were added in.
    `simulate_seconds` splits a duration into a fixed number of equal
    sub-intervals and runs the same per-substep pass.

    Attributes:
        bodies (Tuple[Body, ...]): All bodies, in insertion order.
        gravitators (Tuple[Gravitator, ...]): Bodies that exert gravity.
        gravitatees (Tuple[Gravitatee, ...]): Bodies moved by gravity.
        minimum_timestep (timedelta): Upper bound on a single substep in `update`.
    """

    def __init__(self, bodies: Iterable[Body], minimum_timestep: Optional[timedelta] = None):
        """Initializes the simulation and wires gravitators into gravitatees.

        Args:
            bodies: The initial bodies. The collection is copied; later changes go
                through `add_body`.
            minimum_timestep: Largest substep `update` may take. Defaults to
                `config.Physics.SIMULATION_MINIMUM_TIMESTEP_SECONDS`.

        Raises:
            ConfigurationError: If the bodies' clocks disagree (chained from a
                `SimulationDesyncError`) or the minimum timestep is not positive.
        """
        if minimum_timestep is None:
            minimum_timestep = timedelta(seconds=config.Physics.SIMULATION_MINIMUM_TIMESTEP_SECONDS)
        if minimum_timestep <= timedelta(0):
            raise ConfigurationError(f"Simulation minimum timestep must be positive, got {minimum_timestep}.")

        self._minimum_timestep = minimum_timestep
        self._bodies: List[Body] = list(bodies)
        self._gravitators: Tuple[Gravitator, ...] = ()
        self._gravitatees: Tuple[Gravitatee, ...] = ()
        self._steps_taken = 0

        try:
            self._sync_check()
        except SimulationDesyncError as e:
            logging.warning(f"Rejected Simulation set-up: {e}")
            raise ConfigurationError(
                "Attempted to initialise Simulation class with bodies that were not synchronised"
            ) from e

        self._update_gravitators_and_gravitatees()
        logging.info(f"Simulation initialized with {len(self._bodies)} bodies "
                     f"({len(self._gravitators)} gravitators, {len(self._gravitatees)} gravitatees), "
                     f"minimum timestep {self._minimum_timestep}.")

    @property
    def bodies(self) -> Tuple[Body, ...]:
        return tuple(self._bodies)

    @property
    def gravitators(self) -> Tuple[Gravitator, ...]:
        return self._gravitators

    @property
    def gravitatees(self) -> Tuple[Gravitatee, ...]:
        return self._gravitatees

    @property
    def minimum_timestep(self) -> timedelta:
        return self._minimum_timestep

    @property
    def current_time(self) -> Optional[datetime]:
        """The shared clock of all bodies, or None for an empty simulation."""
        if not self._bodies:
            return None
        return self._bodies[0].current_time

    def _update_gravitators_and_gravitatees(self) -> None:
        self._gravitators = tuple(b for b in self._bodies if isinstance(b, Gravitator))
        self._gravitatees = tuple(b for b in self._bodies if isinstance(b, Gravitatee))
        for gravitatee in self._gravitatees:
            gravitatee.gravitators = self._gravitators

    def _sync_check(self, bodies: Optional[List[Body]] = None) -> None:
        bodies = self._bodies if bodies is None else bodies
        if bodies and any(b.current_time != bodies[0].current_time for b in bodies):
            raise SimulationDesyncError("Simulation is out of sync", bodies)

    def add_body(self, body: Body) -> None:
        """Adds a body whose clock matches the simulation's.

        The add is atomic: a rejected body is not left in the collection.

        Raises:
            ConfigurationError: If the body's `current_time` differs from the
                simulation's (chained from a `SimulationDesyncError`).
        """
        candidate = self._bodies + [body]
        try:
            self._sync_check(candidate)
        except SimulationDesyncError as e:
            logging.warning(f"Rejected body {body!r}: its clock ({body.current_time}) "
                            f"differs from the simulation's ({self.current_time}).")
            raise ConfigurationError("Attempted to add a desynchronised body to a Simulation") from e

        self._bodies = candidate
        self._update_gravitators_and_gravitatees()
        logging.info(f"Added {type(body).__name__} to simulation; now tracking {len(self._bodies)} bodies.")

    def _advance_all(self, timestep: timedelta) -> None:
        for gravitator in self._gravitators:
            gravitator.advance(timestep)
        for body in self._bodies:
            if not isinstance(body, Gravitator):
                body.advance(timestep)

        self._steps_taken += 1
        if config.Debug.SIMULATION_STEPS and self._steps_taken % config.Debug.LOG_INTERVAL_STEPS == 0:
            logging.debug(f"Simulation step {self._steps_taken}: t={self.current_time}")

    def _fatal_sync_check(self) -> None:
        try:
            self._sync_check()
        except SimulationDesyncError as e:
            logging.critical(f"Bodies drifted out of sync during integration: {e.bodies}", exc_info=True)
            raise

    def update(self, timestep: timedelta) -> None:
        """Advances every body by `timestep` in substeps of at most `minimum_timestep`.

        Raises:
            ValueError: If `timestep` is negative.
            SimulationDesyncError: If bodies disagree afterwards (an engine bug; fatal).
        """
        if timestep < timedelta(0):
            raise ValueError(f"Cannot update a simulation by a negative timestep ({timestep}).")

        time_simulated = timedelta(0)
        while time_simulated < timestep:
            next_timestep = min(self._minimum_timestep, timestep - time_simulated)
            self._advance_all(next_timestep)
            time_simulated += next_timestep

        self._fatal_sync_check()

    def simulate_seconds(self, seconds: float) -> None:
        """Advances every body by `seconds`, split into
        `config.Time.SIMULATE_SECONDS_INTERVALS` equal sub-intervals.

        Sub-interval boundaries are rounded to the clock's resolution but always
        sum to the requested duration.

        Raises:
            ValueError: If `seconds` is negative.
            SimulationDesyncError: If bodies disagree afterwards (an engine bug; fatal).
        """
        if seconds < 0:
            raise ValueError(f"Cannot simulate a negative number of seconds ({seconds}).")

        total = timedelta(seconds=seconds)
        intervals = config.Time.SIMULATE_SECONDS_INTERVALS
        previous_boundary = timedelta(0)
        if total > timedelta(0):
            for i in range(1, intervals + 1):
                boundary = total * i / intervals
                substep = boundary - previous_boundary
                if substep > timedelta(0):
                    self._advance_all(substep)
                previous_boundary = boundary

        self._fatal_sync_check()
