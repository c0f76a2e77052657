# physics_utils.py

import numpy as np

class PhysicsError(Exception):
    """Custom exception for physics-related errors, including numerical issues.

    Raised when an input would make the gravity or orbit computations singular:
    zero separation between a craft and a gravitator, a non-positive semi-major
    axis or gravitational parameter, or an eccentricity outside [0, 1).
    """
    pass

def as_float32_vector(values):
    """
    Narrows a 3-sequence to a single-precision numpy vector.

    Args:
        values (Sequence[float] or np.ndarray): Three components (x, y, z).

    Returns:
        np.ndarray: A new float32 array of shape (3,).

    Raises:
        ValueError: If `values` does not hold exactly three components.
    """
    vector = np.array(values, dtype=np.float32).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {np.shape(values)}.")
    return vector

def rotation_x(angle):
    """Turns a column vector counter-clockwise about the x-axis by `angle` radians."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[1.0, 0.0, 0.0],
                     [0.0, c, -s],
                     [0.0, s, c]], dtype=np.float64)

def rotation_z(angle):
    """Turns a column vector counter-clockwise about the z-axis by `angle` radians."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0.0],
                     [s, c, 0.0],
                     [0.0, 0.0, 1.0]], dtype=np.float64)

def perifocal_to_inertial(inclination, longitude_of_ascending_node, argument_of_periapsis):
    """
    Rotation matrix from the perifocal (orbital-plane) frame to the inertial frame.

    The perifocal frame has x towards periapsis and z along the orbit normal.
    A vector is turned about z by -ω first, then about x by -i, then about z
    by -Ω, i.e. the matrix is rotation_z(-Ω) @ rotation_x(-i) @ rotation_z(-ω).
    With these signs the orbit normal is (sin i sin Ω, sin i cos Ω, cos i)
    and the in-plane reference direction (ω measured from it, clockwise about
    the normal) is (cos Ω, -sin Ω, 0).

    Args:
        inclination (float): i in radians.
        longitude_of_ascending_node (float): Ω in radians.
        argument_of_periapsis (float): ω in radians.

    Returns:
        np.ndarray: 3x3 float64 rotation matrix.
    """
    return (rotation_z(-longitude_of_ascending_node)
            @ rotation_x(-inclination)
            @ rotation_z(-argument_of_periapsis))

def gravitational_acceleration(offset, mu):
    """
    Acceleration towards a point mass at `offset` from the attracted body.

    a = (d / |d|) * mu / |d|^2, evaluated in single precision.

    Args:
        offset (np.ndarray): Displacement from the attracted body to the gravitator (m).
        mu (float): Standard gravitational parameter of the gravitator (m^3/s^2).

    Returns:
        np.ndarray: float32 acceleration vector (m/s^2).

    Raises:
        PhysicsError: If the separation is zero.
    """
    offset = np.asarray(offset, dtype=np.float32)
    distance = np.float32(np.sqrt(np.dot(offset, offset)))
    if distance == 0:
        raise PhysicsError("Zero separation between a gravitatee and its gravitator; acceleration is singular.")
    unit_direction = offset * (np.float32(1) / distance)
    return unit_direction * np.float32(mu / (distance * distance))

def specific_orbital_energy(offset, velocity, mu):
    """v^2 / 2 - mu / r for a body at `offset` from the central mass (J/kg)."""
    offset = np.asarray(offset, dtype=np.float64)
    velocity = np.asarray(velocity, dtype=np.float64)
    radius = np.linalg.norm(offset)
    if radius == 0:
        raise PhysicsError("Specific orbital energy is undefined at zero radius.")
    return 0.5 * float(np.dot(velocity, velocity)) - mu / radius

def specific_angular_momentum(offset, velocity):
    """|r x v| in m^2/s."""
    offset = np.asarray(offset, dtype=np.float64)
    velocity = np.asarray(velocity, dtype=np.float64)
    return float(np.linalg.norm(np.cross(offset, velocity)))
