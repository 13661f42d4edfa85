"""
Value Store Global Constants

Centralized location for all system-wide constants used across the application.
"""

# Durable store namespace
DEFAULT_NAMESPACE = "Values"

# Limits
MAX_KEY_LENGTH = 500

# Admin surface
DEFAULT_ADMIN_PATH_PREFIX = "/_ah/value"

# Application Constants
APP_NAME = "Value Store"
APP_VERSION = "0.1.0"
