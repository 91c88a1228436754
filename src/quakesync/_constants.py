"""Internal constants shared across the library."""

from quakesync import __version__

FEED_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/4.5_month.geojson"
USER_AGENT = f"quakesync/{__version__} (+aiohttp)"

# Feed fetch bounds, in seconds.
CONNECT_TIMEOUT = 10.0
READ_TIMEOUT = 10.0

# Quiescent delay between two sync passes, measured from pass completion.
SYNC_INTERVAL = 5 * 60.0

# Geographic classification is not implemented; every event gets this value.
CONTINENT_PLACEHOLDER = "Global"

LIST_LIMIT_MAX = 200

DATABASE_URL = "sqlite:///quakesync.db"
HTTP_HOST = "0.0.0.0"
HTTP_PORT = 8080
