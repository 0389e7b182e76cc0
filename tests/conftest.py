import os
import sys
from pathlib import Path

# Qt tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)
