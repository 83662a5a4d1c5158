"""Provision a single EC2 runner, upload the server tree and install it."""
