import os

# Settings are read at import time, so they must be in place before the app loads
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("USE_MOCK_DATA", "false")
os.environ.setdefault("OWM_API_KEY", "test-key")
os.environ.setdefault("DEFAULT_CITY", "Toronto")
os.environ.setdefault("DEFAULT_TIMEZONE", "UTC")
