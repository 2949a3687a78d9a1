EARTH_RADIUS_METERS = 6_371_000

# Semicircle encoding used by FIT devices: degrees = semicircles * (180 / 2^31)
SEMICIRCLE_TO_DEGREES = 180.0 / (2 ** 31)

MAX_LATITUDE_DEGREES = 90.0
MAX_LONGITUDE_DEGREES = 180.0

# Web-Mercator limit, keeps the projection finite near the poles
MERCATOR_MAX_LATITUDE = 85.05112878
TILE_SIZE = 256

MIN_ZOOM = 2
MAX_ZOOM = 18

DEFAULT_MAP_WIDTH = 800
DEFAULT_MAP_HEIGHT = 600
MAP_PADDING = 56
MAPBOX_PADDING = 48

# Points kept when a route is prepared for rendering
RENDER_MAX_POINTS = 500
MAPBOX_MAX_POINTS = 250

DEFAULT_TILE_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
DEFAULT_TILE_USER_AGENT = "fitflow/fitness-map"
MAPBOX_STATIC_URL = "https://api.mapbox.com/styles/v1/mapbox/outdoors-v12/static"

ROUTE_COLOR = "#ff3b30"
START_MARKER_COLOR = "#16a34a"
END_MARKER_COLOR = "#dc2626"
CANVAS_COLOR = "#f8fafc"
FILLER_TILE_COLOR = "#e5e7eb"

FITNESS_MIME_TYPES = {
    "fit": "application/vnd.ant.fit",
    "gpx": "application/gpx+xml",
    "tcx": "application/vnd.garmin.tcx+xml",
    "zip": "application/zip",
}

# Maximum file size is 50 MB for fitness files
DEFAULT_FITNESS_MAX_FILE_SIZE = 52_428_800
# Shared by media and fitness storage
DEFAULT_QUOTA_PER_ACCOUNT = 1_073_741_824
