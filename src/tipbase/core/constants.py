"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_TITLE_LENGTH = 255
MAX_CATEGORY_LENGTH = 100
MAX_NAME_LENGTH = 255
MAX_FILENAME_LENGTH = 255
MAX_MIME_TYPE_LENGTH = 100
MAX_IPV6_LENGTH = 45

# Actor resolution
ANONYMOUS_AUTHOR = "Anonymous"
AUTHOR_HEADER = "X-Author-Name"
AUTHOR_QUERY_PARAM = "author"
AUTHOR_BODY_FIELD = "author_name"
IDENTITY_EMAIL_HEADER = "CF-Access-Authenticated-User-Email"

# Audit
DEFAULT_AUDIT_LIMIT = 50
MAX_AUDIT_LIMIT = 500
RECENT_ACTIVITY_SIZE = 10
CHANGE_VALUE_MAX_LENGTH = 50
NO_CHANGES_SENTINEL = "No field changes detected"
DISPLAY_TITLE_KEY = "_displayTitle"
CHANGES_KEY = "_changes"

# Uploads
MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10 MiB
MAX_UPLOAD_FILES = 5
ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)
ALLOWED_EXTENSIONS = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".pdf", ".txt", ".doc", ".docx"}
)
