# config.py
import numpy as np
import logging
from datetime import datetime

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(module)s - %(message)s')

# Fundamental Physical Constants (used across different config sections)
GRAVITATIONAL_CONSTANT_M3_KG_S2 = 6.674e-11  # G in m^3 kg^-1 s^-2
SECONDS_PER_DAY = 86400.0
METRES_PER_AU = 1.496e11

class ConfigurationError(Exception):
    """Custom exception for simulation configuration errors.

    Raised by `SimulationConfig.validate()` when settings are invalid or
    inconsistent, and by the `Simulation` controller when it is handed a set-up
    it cannot accept (bodies whose clocks disagree, a non-positive minimum
    timestep). In the latter case the underlying `SimulationDesyncError` is
    chained as `__cause__` so callers can tell "bad input" apart from an
    internal stepping bug.

    Attributes:
        message (str): A human-readable explanation of the configuration error.
                       This is the first argument passed to the exception constructor.
    """
    pass

class SimulationConfig:
    """Centralized, hierarchical configuration for the orbital dynamics engine.

    Parameters are grouped into nested static classes (`SimulationConfig.Physics`,
    `SimulationConfig.Kepler`, ...). A validated instance named `config` is
    created at the end of this module: `from config import config`.

    Example Usage:
        >>> from config import config
        >>> print(f"G: {config.Physics.GRAVITATIONAL_CONSTANT}")
        >>> print(f"Kepler iterations: {config.Kepler.ITERATIONS}")
    """

    # --- Physics Configuration ---
    class Physics:
        """Configuration for the gravity integrator.

        Attributes:
            GRAVITATIONAL_CONSTANT (float): G in m^3 kg^-1 s^-2. A gravitator's
                standard gravitational parameter is `GRAVITATIONAL_CONSTANT * mass`.
            CRAFT_MINIMUM_TIMESTEP_SECONDS (float): Largest Euler substep a `Craft`
                takes when advanced directly (one day).
            SIMULATION_MINIMUM_TIMESTEP_SECONDS (float): Largest substep the
                `Simulation` controller pushes to its bodies in `update`.
        """
        GRAVITATIONAL_CONSTANT = GRAVITATIONAL_CONSTANT_M3_KG_S2
        CRAFT_MINIMUM_TIMESTEP_SECONDS = SECONDS_PER_DAY
        SIMULATION_MINIMUM_TIMESTEP_SECONDS = 1.0

    # --- Kepler Solver Configuration ---
    class Kepler:
        """Configuration for the Newton-Raphson Kepler equation solver.

        Attributes:
            ITERATIONS (int): Fixed number of Newton-Raphson iterations. There is
                no convergence test; 20 iterations seeded at E = M are accurate to
                double precision for e <= 0.9.
        """
        ITERATIONS = 20

    # --- Time Configuration ---
    class Time:
        """Configuration related to simulation time progression.

        Attributes:
            SIMULATE_SECONDS_INTERVALS (int): Number of equal sub-intervals
                `Simulation.simulate_seconds` splits a request into, independent
                of the minimum timestep.
        """
        SIMULATE_SECONDS_INTERVALS = 1000

    # --- Solar System Data ---
    class SolarSystem:
        """Reference masses, radii and orbital elements for the example scenarios.

        Attributes:
            EARTH_MASS_KG (float): Mass of the Earth in kilograms.
            EARTH_RADIUS_M (float): Mean radius of the Earth in metres.
            SUN_MASS_KG (float): Mass of the Sun in kilograms.
            METRES_PER_AU (float): Astronomical unit in metres.
            J2000_EPOCH (datetime): Reference epoch of the planetary elements.
            ORBIT_DATA (Dict[str, Dict]): Keplerian elements per body. Angles are in
                degrees, semi-major axes in metres. 'central_body' names the
                gravitator the elements are relative to ('Sun' or 'Earth').
        """
        EARTH_MASS_KG = 5.972e24
        EARTH_RADIUS_M = 6.371e6
        SUN_MASS_KG = 1.989e30
        METRES_PER_AU = METRES_PER_AU
        J2000_EPOCH = datetime(2000, 1, 1)
        ORBIT_DATA = {
            'Mercury': {
                'eccentricity': 0.20563069, 'semi_major_axis_m': 0.38709893 * METRES_PER_AU,
                'inclination_deg': 7.00487, 'longitude_of_ascending_node_deg': 48.33167,
                'argument_of_periapsis_deg': 77.45645, 'mean_anomaly_at_epoch_deg': 252.25084,
                'epoch': J2000_EPOCH, 'central_body': 'Sun'
            },
            'Venus': {
                'eccentricity': 0.00677323, 'semi_major_axis_m': 0.72333199 * METRES_PER_AU,
                'inclination_deg': 3.39471, 'longitude_of_ascending_node_deg': 76.68069,
                'argument_of_periapsis_deg': 131.53298, 'mean_anomaly_at_epoch_deg': 181.97973,
                'epoch': J2000_EPOCH, 'central_body': 'Sun'
            },
            'Earth': {
                'eccentricity': 0.01671022, 'semi_major_axis_m': 1.00000011 * METRES_PER_AU,
                'inclination_deg': 0.00005, 'longitude_of_ascending_node_deg': -11.26064,
                'argument_of_periapsis_deg': 102.94719, 'mean_anomaly_at_epoch_deg': 100.46435,
                'epoch': J2000_EPOCH, 'central_body': 'Sun'
            },
            'Mars': {
                'eccentricity': 0.09341233, 'semi_major_axis_m': 1.52366231 * METRES_PER_AU,
                'inclination_deg': 1.85061, 'longitude_of_ascending_node_deg': 49.57854,
                'argument_of_periapsis_deg': 336.04084, 'mean_anomaly_at_epoch_deg': 355.45332,
                'epoch': J2000_EPOCH, 'central_body': 'Sun'
            },
            'ISS': {
                'eccentricity': 0.0003938, 'semi_major_axis_m': EARTH_RADIUS_M + (417000 + 423000) / 2,
                'inclination_deg': 51.6444, 'longitude_of_ascending_node_deg': 38.4733,
                'argument_of_periapsis_deg': 153.2242, 'mean_anomaly_at_epoch_deg': 27.0427,
                'epoch': datetime(2021, 10, 29, 12, 34, 51), 'central_body': 'Earth'
            },
        }

    # --- Scenario Configuration ---
    class Scenario:
        """Initial conditions for the free-fall demo run by `main.py`.

        Attributes:
            FREE_FALL_POSITION_M (List[float]): Initial craft position (x, y, z) in metres.
            FREE_FALL_VELOCITY_M_S (List[float]): Initial craft velocity in m/s.
            INNER_PLANETS_MINIMUM_TIMESTEP_SECONDS (float): Minimum substep of the
                inner-planets simulation (one day).
        """
        FREE_FALL_POSITION_M = [6741000.0, 0.0, 0.0]
        FREE_FALL_VELOCITY_M_S = [0.0, 7777.7777, 0.0]
        INNER_PLANETS_MINIMUM_TIMESTEP_SECONDS = SECONDS_PER_DAY

    # --- Debug Configuration ---
    class Debug:
        """Configuration for debugging features and logging verbosity.

        Attributes:
            KEPLER_SOLVER (bool): Log the final residual of every Kepler solve.
            EULER_INTEGRATION (bool): Log craft state after every Euler substep.
            SIMULATION_STEPS (bool): Log the simulation clock every
                `LOG_INTERVAL_STEPS` substeps.
            LOG_INTERVAL_STEPS (int): Frequency (substeps) of simulation step logging.
        """
        KEPLER_SOLVER = False
        EULER_INTEGRATION = False
        SIMULATION_STEPS = False
        LOG_INTERVAL_STEPS = 1000

    def __init__(self):
        """Initializes the `SimulationConfig` instance and validates it.

        Raises:
            ConfigurationError: If `self.validate()` detects any issue with the
                                configuration values.
        """
        self.validate()

    def validate(self):
        """Performs validation of all engine configuration settings.

        -   **Physics**: G and both minimum timesteps must be positive.
        -   **Kepler**: at least one Newton-Raphson iteration.
        -   **Time**: a positive integer number of `simulate_seconds` intervals.
        -   **SolarSystem**: positive masses and radius; every orbit entry has
            0 <= e < 1, a positive semi-major axis, 0 <= i <= 180 degrees and a
            known central body.
        -   **Debug**: positive logging interval.

        Raises:
            ConfigurationError: If any configuration setting is found to be invalid.
        """
        # Physics validation
        if self.Physics.GRAVITATIONAL_CONSTANT <= 0:
            raise ConfigurationError("Physics.GRAVITATIONAL_CONSTANT must be positive.")
        if self.Physics.CRAFT_MINIMUM_TIMESTEP_SECONDS <= 0:
            raise ConfigurationError("Physics.CRAFT_MINIMUM_TIMESTEP_SECONDS must be positive.")
        if self.Physics.SIMULATION_MINIMUM_TIMESTEP_SECONDS <= 0:
            raise ConfigurationError("Physics.SIMULATION_MINIMUM_TIMESTEP_SECONDS must be positive.")

        # Kepler validation
        if not (isinstance(self.Kepler.ITERATIONS, int) and self.Kepler.ITERATIONS >= 1):
            raise ConfigurationError(f"Kepler.ITERATIONS ({self.Kepler.ITERATIONS}) must be a positive integer.")

        # Time validation
        if not (isinstance(self.Time.SIMULATE_SECONDS_INTERVALS, int) and self.Time.SIMULATE_SECONDS_INTERVALS >= 1):
            raise ConfigurationError(
                f"Time.SIMULATE_SECONDS_INTERVALS ({self.Time.SIMULATE_SECONDS_INTERVALS}) must be a positive integer."
            )

        # Solar System Data Validation
        for name in ('EARTH_MASS_KG', 'SUN_MASS_KG', 'EARTH_RADIUS_M', 'METRES_PER_AU'):
            if getattr(self.SolarSystem, name) <= 0:
                raise ConfigurationError(f"SolarSystem.{name} must be positive.")

        known_central_bodies = {'Sun', 'Earth'}
        for name, data in self.SolarSystem.ORBIT_DATA.items():
            if not (0.0 <= data.get('eccentricity', -1.0) < 1.0):
                raise ConfigurationError(
                    f"Eccentricity of '{name}' ({data.get('eccentricity')}) must be >= 0 and < 1."
                )
            if data.get('semi_major_axis_m', 0.0) <= 0:
                raise ConfigurationError(f"Semi-major axis of '{name}' must be positive.")
            if not (0.0 <= data.get('inclination_deg', -1.0) <= 180.0):
                raise ConfigurationError(
                    f"Inclination of '{name}' ({data.get('inclination_deg')}) must be between 0 and 180 degrees inclusive."
                )
            if data.get('central_body') not in known_central_bodies:
                raise ConfigurationError(
                    f"Central body '{data.get('central_body')}' for '{name}' must be one of {sorted(known_central_bodies)}."
                )
            if not isinstance(data.get('epoch'), datetime):
                raise ConfigurationError(f"Epoch of '{name}' must be a datetime.")

        # Scenario validation
        if np.shape(self.Scenario.FREE_FALL_POSITION_M) != (3,) or np.shape(self.Scenario.FREE_FALL_VELOCITY_M_S) != (3,):
            raise ConfigurationError("Scenario free-fall position and velocity must be 3-vectors.")
        if self.Scenario.INNER_PLANETS_MINIMUM_TIMESTEP_SECONDS <= 0:
            raise ConfigurationError("Scenario.INNER_PLANETS_MINIMUM_TIMESTEP_SECONDS must be positive.")

        if self.Debug.LOG_INTERVAL_STEPS <= 0:
            raise ConfigurationError("Debug.LOG_INTERVAL_STEPS must be positive.")

        logging.info("Configuration validated successfully.")


# --- Instantiate the configuration ---
# This makes the config object available for import and runs validation.
# e.g., from config import config
try:
    config = SimulationConfig()
except ConfigurationError as e:
    logging.error(f"FATAL CONFIGURATION ERROR: {e}", exc_info=True)
    raise
