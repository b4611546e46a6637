SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SEED_DEMO_DATA = False
SNAPSHOT_PATH = None

SESSION_DAYS = 1
