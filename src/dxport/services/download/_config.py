"""
Configuration constants for download service.
"""

# Read size for the streamed response body
DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1MB

# Worker slots for batch downloads of independent files
DEFAULT_MAX_WORKERS = 4

# Local name meaning "write to standard output"
STDOUT = "-"

# Describe fields a download needs; free-form details are never requested
DESCRIBE_FIELDS = ("name", "size")
