import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Fill the store with the demo school on startup
SEED_DEMO_DATA = bool(int(os.getenv("SEED_DEMO_DATA", "1")))
# Optional: JSON snapshot (from /api/backup/export) to load instead of the demo data
SNAPSHOT_PATH = os.getenv("SNAPSHOT_PATH") or None

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
