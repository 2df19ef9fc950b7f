"""
Configuration constants for upload service.
"""

# Part size for chunked upload, fixed for every part of a session
PART_SIZE = 4 * 1024 * 1024  # 4MB

# Worker slots for batch uploads of independent files
DEFAULT_MAX_WORKERS = 4
