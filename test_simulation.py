import unittest
from datetime import datetime, timedelta
from unittest.mock import patch

import numpy as np

from bodies import Craft, Gravitatee, Gravitator, OriginEarth, StaticPlanet
from config import config, ConfigurationError
from position import Position
from simulation import Simulation, SimulationDesyncError

T0 = datetime(2021, 10, 29, 12, 0, 0)

class DriftingPlanet(Gravitator):
    """A gravitator moving in a straight line, so substep ordering is observable."""

    def __init__(self, initial_time, position, velocity, mass):
        self._current_time = initial_time
        self._position = position
        self._velocity = np.asarray(velocity, dtype=np.float32)
        self._mass = mass

    @property
    def position(self):
        return self._position

    @property
    def current_time(self):
        return self._current_time

    @property
    def mass(self):
        return self._mass

    def advance(self, timestep):
        self._position.change_by(np.float32(timestep.total_seconds()) * self._velocity)
        self._current_time += timestep

class ClockWatcher(Gravitatee):
    """Records the clock of its first gravitator every time it is advanced."""

    def __init__(self, initial_time):
        self._current_time = initial_time
        self._position = Position([1e7, 0.0, 0.0])
        self.seen = []

    @property
    def position(self):
        return self._position

    @property
    def current_time(self):
        return self._current_time

    def advance(self, timestep):
        self.seen.append((self._current_time + timestep, self.gravitators[0].current_time))
        self._current_time += timestep

class RunawayClockPlanet(StaticPlanet):
    """Advances its clock twice as fast as asked."""

    def advance(self, timestep):
        super().advance(timestep * 2)

def earth_and_craft(minimum_timestep=None):
    earth = OriginEarth(T0)
    craft = Craft(T0, Position([7e6, 0.0, 0.0]), [0.0, 7546.0, 0.0])
    return earth, craft, Simulation([earth, craft], minimum_timestep)

def snapshot(simulation):
    return [(body.position.icrs_vector, getattr(body, 'velocity', None), body.current_time)
            for body in simulation.bodies]

class TestSimulationConstruction(unittest.TestCase):

    def test_partitions_and_wires_bodies(self):
        earth, craft, simulation = earth_and_craft()
        self.assertEqual(simulation.bodies, (earth, craft))
        self.assertEqual(simulation.gravitators, (earth,))
        self.assertEqual(simulation.gravitatees, (craft,))
        self.assertIs(craft.gravitators, simulation.gravitators)
        self.assertEqual(simulation.current_time, T0)

    def test_default_minimum_timestep(self):
        _, _, simulation = earth_and_craft()
        self.assertEqual(simulation.minimum_timestep,
                         timedelta(seconds=config.Physics.SIMULATION_MINIMUM_TIMESTEP_SECONDS))

    def test_desynchronised_bodies_rejected(self):
        earth = OriginEarth(T0)
        late = StaticPlanet(T0 + timedelta(seconds=1), Position([1e9, 0.0, 0.0]), 1e20)
        with self.assertRaises(ConfigurationError) as context:
            Simulation([earth, late])
        cause = context.exception.__cause__
        self.assertIsInstance(cause, SimulationDesyncError)
        self.assertEqual(cause.bodies, (earth, late))

    def test_non_positive_minimum_timestep_rejected(self):
        with self.assertRaises(ConfigurationError):
            Simulation([OriginEarth(T0)], timedelta(0))

    def test_owns_a_copy_of_the_body_collection(self):
        bodies = [OriginEarth(T0)]
        simulation = Simulation(bodies)
        bodies.append(StaticPlanet(T0 + timedelta(hours=1), Position([1.0, 0.0, 0.0]), 1.0))
        self.assertEqual(len(simulation.bodies), 1)

    def test_empty_simulation(self):
        simulation = Simulation([])
        self.assertIsNone(simulation.current_time)
        simulation.update(timedelta(seconds=5))
        simulation.simulate_seconds(5)
        self.assertEqual(simulation.bodies, ())

class TestAddBody(unittest.TestCase):

    def test_rejects_desynchronised_body_atomically(self):
        earth = OriginEarth(T0)
        simulation = Simulation([earth])
        late = StaticPlanet(T0 + timedelta(seconds=1), Position([1e9, 0.0, 0.0]), 1e20)

        with self.assertRaises(ConfigurationError) as context:
            simulation.add_body(late)

        self.assertIsInstance(context.exception.__cause__, SimulationDesyncError)
        self.assertEqual(simulation.bodies, (earth,))
        simulation.update(timedelta(seconds=10))
        self.assertEqual(earth.current_time, T0 + timedelta(seconds=10))

    def test_rewires_gravitatees(self):
        earth, craft, simulation = earth_and_craft()
        moon = StaticPlanet(T0, Position([3.84e8, 0.0, 0.0]), 7.35e22)
        simulation.add_body(moon)
        self.assertEqual(simulation.gravitators, (earth, moon))
        self.assertEqual(craft.gravitators, (earth, moon))

    def test_added_gravitatee_receives_gravitators(self):
        earth = OriginEarth(T0)
        simulation = Simulation([earth])
        craft = Craft(T0, Position([7e6, 0.0, 0.0]), [0.0, 7546.0, 0.0])
        simulation.add_body(craft)
        self.assertEqual(craft.gravitators, (earth,))
        self.assertEqual(simulation.gravitatees, (craft,))

    def test_add_after_stepping_requires_matching_clock(self):
        _, _, simulation = earth_and_craft()
        simulation.update(timedelta(seconds=3))
        with self.assertRaises(ConfigurationError):
            simulation.add_body(StaticPlanet(T0, Position([1e9, 0.0, 0.0]), 1e20))
        simulation.add_body(StaticPlanet(T0 + timedelta(seconds=3), Position([1e9, 0.0, 0.0]), 1e20))
        self.assertEqual(len(simulation.bodies), 3)

class TestStepping(unittest.TestCase):

    def test_sync_invariant_across_operations(self):
        earth, craft, simulation = earth_and_craft()
        simulation.update(timedelta(seconds=2.5))
        simulation.simulate_seconds(3.3)
        simulation.add_body(StaticPlanet(simulation.current_time, Position([1e9, 0.0, 0.0]), 1e20))
        simulation.update(timedelta(minutes=1))
        expected = T0 + timedelta(seconds=2.5 + 3.3 + 60)
        self.assertEqual({body.current_time for body in simulation.bodies}, {expected})

    def test_update_substeps_bounded_by_minimum_timestep(self):
        _, _, simulation = earth_and_craft(timedelta(seconds=1))
        with patch.object(simulation, '_advance_all', wraps=simulation._advance_all) as advance_all:
            simulation.update(timedelta(seconds=3.5))
        substeps = [call.args[0] for call in advance_all.call_args_list]
        self.assertEqual(substeps, [timedelta(seconds=1)] * 3 + [timedelta(seconds=0.5)])
        self.assertEqual(simulation.current_time, T0 + timedelta(seconds=3.5))

    def test_simulate_seconds_uses_fixed_interval_count(self):
        _, _, simulation = earth_and_craft(timedelta(days=1))
        with patch.object(simulation, '_advance_all', wraps=simulation._advance_all) as advance_all:
            simulation.simulate_seconds(10)
        self.assertEqual(advance_all.call_count, config.Time.SIMULATE_SECONDS_INTERVALS)
        self.assertEqual(simulation.current_time, T0 + timedelta(seconds=10))

    def test_simulate_seconds_sums_exactly(self):
        _, _, simulation = earth_and_craft()
        simulation.simulate_seconds(0.0015)
        self.assertEqual(simulation.current_time, T0 + timedelta(microseconds=1500))
        simulation.simulate_seconds(1 / 3)
        self.assertEqual(simulation.current_time, T0 + timedelta(microseconds=1500) + timedelta(seconds=1 / 3))

    def test_zero_step_is_idempotent(self):
        _, _, simulation = earth_and_craft()
        before = snapshot(simulation)
        simulation.update(timedelta(0))
        simulation.simulate_seconds(0)
        after = snapshot(simulation)
        for (p0, v0, t0), (p1, v1, t1) in zip(before, after):
            np.testing.assert_array_equal(p0, p1)
            if v0 is not None:
                np.testing.assert_array_equal(v0, v1)
            self.assertEqual(t0, t1)

    def test_negative_durations_rejected(self):
        _, _, simulation = earth_and_craft()
        with self.assertRaises(ValueError):
            simulation.update(timedelta(seconds=-1))
        with self.assertRaises(ValueError):
            simulation.simulate_seconds(-1)
        self.assertEqual(simulation.current_time, T0)

    def test_gravitators_advance_before_gravitatees(self):
        planet = StaticPlanet(T0, Position([0.0, 0.0, 0.0]), 6e24)
        watcher = ClockWatcher(T0)
        simulation = Simulation([watcher, planet], timedelta(seconds=1))
        simulation.update(timedelta(seconds=3))
        self.assertEqual(len(watcher.seen), 3)
        for own_time, gravitator_time in watcher.seen:
            self.assertEqual(own_time, gravitator_time)

    def test_result_independent_of_insertion_order(self):
        def run(order):
            planet = DriftingPlanet(T0, Position([0.0, 0.0, 0.0]), [0.0, 30.0, 0.0], 6e24)
            craft = Craft(T0, Position([7e6, 0.0, 0.0]), [0.0, 7546.0, 0.0])
            bodies = [planet, craft] if order == 'planet-first' else [craft, planet]
            Simulation(bodies, timedelta(seconds=1)).update(timedelta(seconds=20))
            return craft.position.icrs_vector, craft.velocity

        position_a, velocity_a = run('planet-first')
        position_b, velocity_b = run('craft-first')
        np.testing.assert_array_equal(position_a, position_b)
        np.testing.assert_array_equal(velocity_a, velocity_b)

    def test_desync_after_stepping_is_fatal(self):
        earth = OriginEarth(T0)
        runaway = RunawayClockPlanet(T0, Position([1e9, 0.0, 0.0]), 1e20)
        simulation = Simulation([earth, runaway])
        with self.assertRaises(SimulationDesyncError) as context:
            simulation.update(timedelta(seconds=1))
        self.assertNotIsInstance(context.exception, ConfigurationError)
        self.assertEqual(context.exception.bodies, (earth, runaway))

    def test_craft_free_fall_stays_in_orbit(self):
        earth = OriginEarth(T0)
        craft = Craft(T0, Position([6.741e6, 0.0, 0.0]), [0.0, 7777.7777, 0.0])
        simulation = Simulation([earth, craft], timedelta(seconds=1))
        initial_radius = 6.741e6
        radii = []
        for _ in range(90):
            simulation.update(timedelta(seconds=60))
            radii.append(np.linalg.norm(craft.position.icrs_vector))
        self.assertGreater(min(radii) / initial_radius, 0.98)
        self.assertLess(max(radii) / initial_radius, 1.07)
        self.assertEqual(simulation.current_time, T0 + timedelta(seconds=5400))

if __name__ == '__main__':
    unittest.main()
