"""
Job input/output transfers for dxport.

Runs inside a job's worker: fetches the files a job was given and uploads
the files an app declares as outputs.

Features:
- Inputs from ``job_input.json``, lists of files into numbered folders
- Outputs from ``out/<name>/`` checked against the app's ``outputSpec``
- Job-output JSON with a file link per uploaded output
"""

from dxport.services.jobs._aio import AsyncJobTransferService
from dxport.services.jobs._config import INPUT_DIR, JOB_INPUT_FILE, OUTPUT_DIR
from dxport.services.jobs._models import AppSpec, OutputSpec, OutputUploads
from dxport.services.jobs._plan import (
    collect_outputs,
    input_download_jobs,
    load_job_input,
    load_output_spec,
    plan_output_uploads,
)
from dxport.services.jobs._sync import JobTransferService

__all__ = [
    "INPUT_DIR",
    "JOB_INPUT_FILE",
    "OUTPUT_DIR",
    "AppSpec",
    "OutputSpec",
    "OutputUploads",
    "load_job_input",
    "load_output_spec",
    "input_download_jobs",
    "plan_output_uploads",
    "collect_outputs",
    "JobTransferService",
    "AsyncJobTransferService",
]
