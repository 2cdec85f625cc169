"""Internal constants shared across the library."""

BASE_URL = "https://sta.colife.org.tw/STA_WaterResource_v2/v1.0"
USER_AGENT = "pyfloodsensors/0.1"

# ------------------------------------------------------------------
# Remote source paging
# ------------------------------------------------------------------

PAGE_SIZE = 300
CONCURRENCY_LIMIT = 10
REQUEST_TIMEOUT_S = 15.0
BATCH_PAUSE_S = 0.1

# SensorThings reports the total under "@iot.count"; some mirrors use "totalCount".
TOTAL_COUNT_KEYS: tuple[str, ...] = ("@iot.count", "totalCount")

# ------------------------------------------------------------------
# Authority labels used by the remote filter
# ------------------------------------------------------------------

AUTHORITY_PRIMARY = "水利署"
AUTHORITY_JOINT = "水利署（與縣市政府合建）"

DATASTREAM_CATEGORY_TYPE = "淹水感測器"
DATASTREAM_CATEGORY = "淹水深度"

# ------------------------------------------------------------------
# Taiwan bounding box (degrees)
# ------------------------------------------------------------------

LATITUDE_RANGE: tuple[float, float] = (10.36, 26.40)
LONGITUDE_RANGE: tuple[float, float] = (114.35, 122.11)

DEFAULT_UNIT = "cm"

# ------------------------------------------------------------------
# Cache
# ------------------------------------------------------------------

CACHE_MAX_AGE_S = 3 * 60.0

# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------

RENDER_BATCH_SIZE = 100
DETAIL_DELAY_S = 0.3
GRID_SIZE = 0.01
DENSE_BUCKET_THRESHOLD = 10
