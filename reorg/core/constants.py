"""Core constants: store limits and canonical field names.

Single source of truth for literal values shared by services and scripts.
"""

# Firestore rejects commits with more than 500 writes.
FIRESTORE_MAX_BATCH_WRITES = 500
# Default group size; leaves headroom below the hard limit.
DEFAULT_BATCH_SIZE = 400

# Flat lookup entry fields (users/{userId})
FIELD_ORGANIZATION_ID = "organizationId"
FIELD_USER_ID = "userId"
FIELD_EMAIL = "email"
LOOKUP_FIELDS = (FIELD_ORGANIZATION_ID, FIELD_USER_ID, FIELD_EMAIL)

# Migration metadata
FIELD_MIGRATED_AT = "migratedAt"
