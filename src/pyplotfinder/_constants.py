"""Internal constants shared across the library."""

OSRM_BASE_URL = "https://router.project-osrm.org"
OSRM_PROFILE = "foot"
USER_AGENT = "pyplotfinder"

# Designated entrance of the cemetery; origin of last resort for routing.
REFERENCE_LAT = 15.494177
REFERENCE_LNG = 120.554702

# ------------------------------------------------------------------
# Proximity fallback
# ------------------------------------------------------------------

EARTH_RADIUS_M = 6_371_000.0
ORIGIN_RADIUS_M = 10_000.0

# ------------------------------------------------------------------
# Location feeds
# ------------------------------------------------------------------

SAMPLE_LOG_CAPACITY = 50
MIN_SIMULATED_INTERVAL_MS = 250
DEFAULT_SIMULATED_INTERVAL_MS = 1000
LIVE_REPORT_INTERVAL_S = 1.0
SAMPLE_EXPORT_FILENAME = "location-samples.json"

# Accuracy reported for simulated samples, in meters.
SIMULATED_ACCURACY_M = 5.0

# ------------------------------------------------------------------
# Name matching thresholds
# ------------------------------------------------------------------

CLOSE_AVERAGE_THRESHOLD = 0.65
CLOSE_SINGLE_THRESHOLD = 0.75
