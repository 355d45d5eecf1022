"""
conftest.py – shared pytest configuration and test bootstrap.

Pytest imports this module before collecting any test file, which lets us prepare the
environment once:
1) Put the project root on `sys.path` so `provider_api` and `config` import without an
   editable install.
2) Provide harmless credential defaults so the configuration layer never sees a real account
   and nothing in the suite can reach the live provider by accident.
"""

import os
import sys
from pathlib import Path

# Ensure project root is on sys.path for direct imports like `provider_api`, `config`.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Provide required environment defaults for tests
os.environ.setdefault("CLOUDWAYS_EMAIL", "test@example.com")
os.environ.setdefault("CLOUDWAYS_API_KEY", "test-key")
os.environ.setdefault("CLOUDWAYS_BASE_URL", "http://cloudways.test/api/v1")
