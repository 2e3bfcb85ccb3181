"""Shared application constants.

Centralizes repeat values used across the analytics and import logic so we can
document and adjust them in one place.
"""

# Unit conversion factors
METERS_TO_KM = 0.001
METERS_TO_MILES = 0.000621371
MPS_TO_KMH = 3.6
MPS_TO_MPH = 2.23694

# Distance of one statute mile in meters
MILE_M = 1609.34

# Mean Earth radius used for haversine distances (meters)
EARTH_RADIUS_M = 6371000.0

# Minimum speed considered "moving" (m/s). ~1.1 mph.
MOVING_SPEED_MPS = 0.5

# Heart rate zone bounds as fractions of HR max.
# Z1: [0.5, 0.6], Z2: [0.6, 0.7], ..., Z5: [0.9, max]
HR_ZONE_BOUNDS = (0.5, 0.6, 0.7, 0.8, 0.9, 1.0)
HR_ZONE_NAMES = ("Recovery", "Aerobic", "Tempo", "Threshold", "VO2 Max")
# Reference midpoint (% of max) shown next to each zone
HR_ZONE_REFERENCE_PCT = (55, 65, 75, 85, 95)

# Banister-style exponential weighting of the HR ratio
TRIMP_INTENSITY_EXPONENT = 1.92

# HR drift compares the first and last 10% of an activity
HR_DRIFT_MIN_SAMPLES = 10
HR_DRIFT_HEAD_END = 0.1
HR_DRIFT_TAIL_START = 0.9

# Pace drift compares the first and last quarter
PACE_DRIFT_MIN_SAMPLES = 10
PACE_DRIFT_HEAD_END = 0.25
PACE_DRIFT_TAIL_START = 0.75

# Strava sport types grouped for Eddington numbers
RUN_SPORT_TYPES = ("Run", "TrailRun")
RIDE_SPORT_TYPES = ("Ride", "VirtualRide")

# Title keywords that suggest an activity was a race
RACE_KEYWORDS = (
    "race", "marathon", "5k", "10k", "15k", "10mi", "10 mi", "10 mile",
    "half marathon", "half-marathon", "halfmarathon", "hm", "ultra",
    "trail race", "xc", "cross country", "championship", "champs",
    # major marathons
    "boston", "chicago", "nyc", "berlin", "london", "tokyo",
    "ironman", "triathlon", "duathlon",
    "turkey trot", "jingle", "shamrock", "firecracker", "freedom run",
)

# Strava workout_type values meaning "race" (run = 1, ride = 11)
STRAVA_RACE_WORKOUT_TYPES = ("1", "11")

# Suffer score above which an effort counts as race-like
HIGH_SUFFER_SCORE = 150
