# main.py
import argparse # For command line scenario selection
import logging
import sys
from datetime import datetime, timedelta, timezone

import numpy as np

from config import ConfigurationError
from physics_utils import PhysicsError
from scenarios import EarthIss, FreeFall, InnerPlanets

SCENARIOS = {
    'free-fall': FreeFall,
    'earth-iss': EarthIss,
    'inner-planets': InnerPlanets,
}

class OrbitalSimulationRunner:
    """Runs one of the example scenarios and reports body positions.

    This is the engine's console front end: it stands in for the renderer by
    reading each body's `position` and `current_time` after every
    `Simulation.update` call, and never writes to the simulation.

    Attributes:
        scenario: The scenario instance (exposes `.simulation`).
        timestep (timedelta): Simulated time per reported step.
    """
    def __init__(self, scenario_name: str, timestep: timedelta, initial_time: datetime = None):
        """Builds the requested scenario.

        Raises:
            ConfigurationError: If the scenario name is unknown or the scenario's
                bodies cannot be assembled into a synchronized simulation.
        """
        if scenario_name not in SCENARIOS:
            raise ConfigurationError(
                f"Unknown scenario '{scenario_name}'. Choose one of: {', '.join(sorted(SCENARIOS))}."
            )
        if initial_time is None:
            initial_time = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
        self.scenario = SCENARIOS[scenario_name](initial_time)
        self.timestep = timestep
        logging.info(f"Scenario '{scenario_name}' ready at {initial_time}, reporting every {timestep}.")

    def report(self):
        """Logs the position and distance from the origin of every body."""
        simulation = self.scenario.simulation
        for body in simulation.gravitatees:
            position = body.position
            distance = np.linalg.norm(position.icrs_vector)
            logging.info(f"[{simulation.current_time}] {type(body).__name__} at "
                         f"({position.x:.1f}, {position.y:.1f}, {position.z:.1f}) m, r={distance:.1f} m")

    def run(self, steps: int):
        for _ in range(steps):
            self.report()
            self.scenario.simulation.update(self.timestep)
        self.report()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run an orbital dynamics scenario and log body positions.")
    parser.add_argument('--scenario', choices=sorted(SCENARIOS), default='free-fall',
                        help="Which example simulation to run.")
    parser.add_argument('--steps', type=int, default=90, help="Number of reported steps.")
    parser.add_argument('--timestep', type=float, default=60.0,
                        help="Simulated seconds per reported step.")
    parser.add_argument('--verbose', action='store_true', help="Enable DEBUG logging.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        if args.steps < 0 or args.timestep < 0:
            raise ConfigurationError("--steps and --timestep must be non-negative.")
        runner = OrbitalSimulationRunner(args.scenario, timedelta(seconds=args.timestep))
        runner.run(args.steps)
    except ConfigurationError as e_config:
        logging.critical(f"Simulation could not be set up due to a ConfigurationError: {e_config}", exc_info=True)
        return 2
    except PhysicsError as e_physics:
        logging.critical(f"Simulation hit a numerical degeneracy: {e_physics}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
