from __future__ import annotations

import faulthandler
import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

faulthandler.enable()  # Ensure crashes emit tracebacks.

# Keep test runs from writing into the user's log directory.
os.environ.setdefault("SHEETBIND_LOG_DIR", tempfile.mkdtemp(prefix="sheetbind-logs-"))
