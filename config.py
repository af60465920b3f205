import os
import sys

from dotenv import load_dotenv

# Load .env but don't override existing environment variables
# This allows test scripts and containers to inject settings before import
load_dotenv(".env", override=False)

# Database
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/storefront.db")
SQL_ECHO = os.environ.get("SQL_ECHO", "false") == "true"

# Admin Authentication
# Admin actor IDs come from the authentication layer; every admin-only engine
# operation checks the supplied actor against this list and fails closed.
try:
    _admin_id_list_str = os.environ.get("ADMIN_ID_LIST")
    if not _admin_id_list_str or len(_admin_id_list_str.strip()) == 0:
        raise ValueError("ADMIN_ID_LIST environment variable is not set or empty")
    ADMIN_ID_LIST = [int(admin_id.strip()) for admin_id in _admin_id_list_str.split(',') if admin_id.strip()]
    if len(ADMIN_ID_LIST) == 0:
        raise ValueError("ADMIN_ID_LIST must contain at least one admin ID")
except ValueError as e:
    print(f"\n ERROR: Invalid ADMIN_ID_LIST configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected format: comma-separated list of admin user IDs", file=sys.stderr)
    print(f"Example: ADMIN_ID_LIST=1,2", file=sys.stderr)
    print(f"Current value: {os.environ.get('ADMIN_ID_LIST', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)

# Redis (consumer of cache invalidation events)
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD") or None
CACHE_KEY_PREFIX = os.environ.get("CACHE_KEY_PREFIX", "storefront")
CACHE_INVALIDATION_ENABLED = os.environ.get("CACHE_INVALIDATION_ENABLED", "true") == "true"

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"

# Parse LOG_RETENTION_DAYS with error handling
try:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "7"))
    if LOG_RETENTION_DAYS <= 0:
        raise ValueError(f"LOG_RETENTION_DAYS must be positive (got: {LOG_RETENTION_DAYS})")
except ValueError as e:
    print(f"\n ERROR: Invalid LOG_RETENTION_DAYS configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Current value: {os.environ.get('LOG_RETENTION_DAYS', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)
