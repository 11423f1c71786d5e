"""Root conftest — shared test configuration."""

import os

# Ensure tests never pick up a developer's real credentials
os.environ["GITHUB_USER"] = "octotest"
os.environ.pop("GITHUB_TOKEN", None)
