import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SEED_DEMO_DATA = bool(int(os.getenv("SEED_DEMO_DATA", "0")))
SNAPSHOT_PATH = os.getenv("SNAPSHOT_PATH") or None

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
