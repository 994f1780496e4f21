"""Global pytest configuration."""

import os

# Tests run against in-memory stores unless a test builds its own engine
os.environ.pop("DATABASE_URL", None)
os.environ.setdefault("ENABLE_RATE_REFRESH_JOB", "false")
