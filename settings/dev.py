from settings.common import *

# Enable debugging
DEBUG = True

# Allow all hostnames to access the server
ALLOWED_HOSTS = ["*"]

# Log every SQL query when asked to, useful for comparing the round trips
# made by the incremental and batch importers.
if is_truthy(os.environ.get("LOG_SQL")):
    LOGGING["loggers"]["django.db.backends"] = {
        "handlers": ["console"],
        "level": "DEBUG",
        "propagate": False,
    }
