"""
Single place for default campaign configuration.
Change DEFAULT_SETUP_ID to switch which seed ledger a new campaign starts from (when no setup_id is provided).
"""
# Setup id from data/setups/<id>/ (e.g. "empty", "sword_coast"). This is the default for new campaigns.
DEFAULT_SETUP_ID = "empty"

# Authority used when a region is created without one through the API
DEFAULT_AUTHORITY = 20

# Frontends allowed to call the API during development
CORS_ORIGINS = ["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"]
