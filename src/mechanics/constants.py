"""
Physical constants (SI) and driver defaults (scenario units).
"""

# Physical constants
G = 6.6743e-11  # m³ kg⁻¹ s⁻²
EARTH_MASS = 5.972e24  # kg
EARTH_RADIUS = 6.3781e6  # m
EARTH_ORBITAL_RADIUS = 150.36e9  # m
EARTH_ORBITAL_VELOCITY = 29780.0  # m/s
SUN_MASS = 1.98847e30  # kg
ONE_YEAR = 31_536_000  # s

# Driver defaults
DEFAULT_GRAVITATIONAL_CONSTANT = 1.0
DEFAULT_TIME_STEP = 1.0e-4
DEFAULT_STEPS_PER_TICK = 1
DEFAULT_TRAIL_LENGTH = 500

DEFAULT_FIELD_BOUNDS = (-1.0, 1.0, -1.0, 1.0, -1.0, 1.0)
DEFAULT_FIELD_SPACING = 0.25
