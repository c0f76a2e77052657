# scenarios.py
"""Ready-made simulations used by the console driver and as integration fixtures."""
from datetime import datetime, timedelta

from bodies import Craft, OriginEarth, OriginSun
from config import config, ConfigurationError
from orbit import Orbit
from position import Position
from simulation import Simulation


def orbit_from_config(name: str) -> Orbit:
    """Builds the `Orbit` stored under `name` in `config.SolarSystem.ORBIT_DATA`."""
    try:
        data = config.SolarSystem.ORBIT_DATA[name]
    except KeyError:
        raise ConfigurationError(f"No orbital elements configured for '{name}'.") from None
    return Orbit.from_degrees(
        data['eccentricity'],
        data['semi_major_axis_m'],
        data['inclination_deg'],
        data['longitude_of_ascending_node_deg'],
        data['argument_of_periapsis_deg'],
        data['mean_anomaly_at_epoch_deg'],
        data['epoch'],
    )


class EarthIss:
    """The ISS orbiting a fixed Earth."""

    def __init__(self, initial_time: datetime):
        self.earth = OriginEarth(initial_time)
        self.iss = Craft.from_orbit(initial_time, orbit_from_config('ISS'), self.earth)
        self.simulation = Simulation([self.earth, self.iss])


class InnerPlanets:
    """Mercury, Venus, Earth and Mars orbiting a fixed Sun, stepped a day at a time."""

    PLANETS = ('Mercury', 'Venus', 'Earth', 'Mars')

    def __init__(self, initial_time: datetime):
        self.sun = OriginSun(initial_time)
        self.planets = {name: Craft.from_orbit(initial_time, orbit_from_config(name), self.sun)
                        for name in self.PLANETS}
        self.simulation = Simulation(
            [self.sun, *self.planets.values()],
            timedelta(seconds=config.Scenario.INNER_PLANETS_MINIMUM_TIMESTEP_SECONDS),
        )

    @property
    def mercury(self) -> Craft:
        return self.planets['Mercury']

    @property
    def venus(self) -> Craft:
        return self.planets['Venus']

    @property
    def earth(self) -> Craft:
        return self.planets['Earth']

    @property
    def mars(self) -> Craft:
        return self.planets['Mars']


class FreeFall:
    """A craft launched sideways from just above a fixed Earth."""

    def __init__(self, initial_time: datetime, minimum_timestep: timedelta = None):
        self.earth = OriginEarth(initial_time)
        self.craft = Craft(
            initial_time,
            Position(config.Scenario.FREE_FALL_POSITION_M),
            config.Scenario.FREE_FALL_VELOCITY_M_S,
        )
        self.simulation = Simulation([self.earth, self.craft], minimum_timestep)
