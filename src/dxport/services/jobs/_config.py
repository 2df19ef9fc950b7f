"""
Configuration constants for job input/output transfers.
"""

# Defaults below the home directory, as laid out on a job's worker
JOB_INPUT_FILE = "job_input.json"
INPUT_DIR = "in"
OUTPUT_DIR = "out"

# Output classes that carry files
FILE = "file"
ARRAY_FILE = "array:file"
