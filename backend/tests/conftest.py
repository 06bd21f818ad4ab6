import os

# Settings are read once at import time; give the test run its own store
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("GOV_FLOOD_API_URL", "https://gov.test/floods")
os.environ.setdefault("GOV_SHELTER_API_URL", "https://gov.test/shelters")
