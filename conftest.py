"""Configure pytest."""

import os
import sys
from pathlib import Path

root_dir = Path(__file__).parent

# Make the src layout importable without an editable install
src_path = str(root_dir / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

os.environ["PYTHONPATH"] = src_path
# Prompts would block under pytest
os.environ.setdefault("ANIMATCH_NO_RICH", "1")
