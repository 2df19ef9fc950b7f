"""
dxport CLI entry point.

Usage:
    python -m dxport upload reads.fq --path project-xxxx:/data
    python -m dxport download /data/reads.fq
    python -m dxport ls
"""

from dxport.cli import main

if __name__ == "__main__":
    main()
