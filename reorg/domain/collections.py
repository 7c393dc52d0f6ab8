"""Firestore collection names and document paths (schema-in-code).

Firestore has no DDL. Collections exist once a document is written
under them, so these constants and path builders are the single source
of truth for both layouts:

    Flat (legacy):
        users/{userId}                      lookup entry after migration
        users/{userId}/schedules/{id}
        projects/{id}, location_settings/{id}, work_locations/{id}, user_groups/{id}

    Hierarchical:
        organizations/{orgId}
        organizations/{orgId}/users/{userId}/schedules/{id}
        organizations/{orgId}/users/{userId}/leaves/{id}
        organizations/{orgId}/projects/{id}
        organizations/{orgId}/location_settings/{id}
        organizations/{orgId}/work_locations/{id}
        organizations/{orgId}/user_groups/{id}
"""

COLLECTION_ORGANIZATIONS = "organizations"
COLLECTION_USERS = "users"
COLLECTION_PROJECTS = "projects"
COLLECTION_LOCATION_SETTINGS = "location_settings"
COLLECTION_WORK_LOCATIONS = "work_locations"
COLLECTION_USER_GROUPS = "user_groups"

# Nested under a user; copied by discovery, listed here for verification only.
COLLECTION_SCHEDULES = "schedules"
COLLECTION_LEAVES = "leaves"

# Flat collections copied as-is into organizations/{orgId}/{name}
TENANT_SCOPED_COLLECTIONS = (
    COLLECTION_PROJECTS,
    COLLECTION_LOCATION_SETTINGS,
    COLLECTION_WORK_LOCATIONS,
    COLLECTION_USER_GROUPS,
)


def join_path(*segments: str) -> str:
    """Join path segments with '/', rejecting empty segments."""
    for segment in segments:
        if not segment:
            raise ValueError(f"Empty path segment in {segments!r}")
    return "/".join(segments)


def organization_path(org_id: str) -> str:
    return join_path(COLLECTION_ORGANIZATIONS, org_id)


def org_collection_path(org_id: str, collection: str) -> str:
    return join_path(COLLECTION_ORGANIZATIONS, org_id, collection)


def org_user_path(org_id: str, user_id: str) -> str:
    return join_path(COLLECTION_ORGANIZATIONS, org_id, COLLECTION_USERS, user_id)


def flat_user_path(user_id: str) -> str:
    """Path of the flat user document (lookup entry once migrated)."""
    return join_path(COLLECTION_USERS, user_id)
