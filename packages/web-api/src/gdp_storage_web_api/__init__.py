"""HTTP API for bucket listing and presigned object URLs."""
