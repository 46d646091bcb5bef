"""
Upload constants, sentinels and defaults.
"""

# Configured endpoint value meaning "no custom endpoint"
S3_ENDPOINT_IS_UNDEFINED = "S3_ENDPOINT_IS_UNDEFINED"

# Canned ACL applied to every uploaded object
BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"

# Date pattern used for the optional timestamp prefix (e.g. 20240315_100507)
TIMESTAMP_PREFIX_PATTERN = "yyyyMMdd_HHmmss"

# Ceiling for draining the upload queue on shutdown (10 minutes)
DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 10 * 60

# Key path separator
KEY_SEPARATOR = "/"

# Env var prefix for configuration and the identifier override
ENV_PREFIX = "LOGSHIP_"

# How often a draining shutdown checks for a stop request from a signal
SHUTDOWN_POLL_INTERVAL_SECONDS = 0.1
