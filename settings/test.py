from settings.common import *


ENV = "test"

DATABASES = {
    "default": dj_database_url.parse(
        os.environ.get("TEST_DATABASE_URL", "sqlite://:memory:"),
    ),
}

SENTRY_ENABLED = False

SPL_USE_BULK_OPERATIONS = False

# Let records reach the root logger so tests can capture them, printed once
# by the root handler.
for logger_name in ("importer", "labels", "common"):
    LOGGING["loggers"][logger_name]["handlers"] = []
    LOGGING["loggers"][logger_name]["propagate"] = True
