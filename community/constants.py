"""
Domain constants shared by models, repositories and services.
"""

import math
from enum import Enum


class IssueStatus(str, Enum):
    """Lifecycle states of a reported issue."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class UserRole(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


# Pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Sphere radius used by 2dsphere indexes; distances computed here match stored data
EARTH_RADIUS_METERS = 6_378_100.0

# Half the circumference: every point on the sphere lies within this distance
MAX_SEARCH_RADIUS_METERS = int(math.pi * EARTH_RADIUS_METERS) + 1

# Coordinates stored when a reporter omits either axis
DEFAULT_COORDINATES = (0.0, 0.0)

MIN_PASSWORD_LENGTH = 6

# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}
