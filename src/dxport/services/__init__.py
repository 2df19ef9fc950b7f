"""Upload, download and search services."""
