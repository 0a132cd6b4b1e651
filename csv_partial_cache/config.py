import os

DEFAULT_ENCODING: str = "utf-8"
DEFAULT_DELIMITER: str = ","

# Snapshot file format tag, written into the header line
SNAPSHOT_FORMAT: str = "cpc1"
SNAPSHOT_TMP_SUFFIX: str = ".tmp"

# Progress events are emitted at most once per this many percent
PROGRESS_STEP_PCT: int = 1

# Print build progress to the terminal (set CSV_PARTIAL_CACHE_VERBOSE=1 to enable)
VERBOSE = os.environ.get("CSV_PARTIAL_CACHE_VERBOSE") == "1"
