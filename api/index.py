"""Serverless entrypoint: exposes the calorie logger as ``app``.

The deployment bundles the repository without installing it, so the
``src`` tree is put on the import path before the package is loaded.
"""

import sys
from pathlib import Path

_SRC_DIR = str(Path(__file__).resolve().parent.parent / "src")
if _SRC_DIR not in sys.path:
    sys.path.insert(0, _SRC_DIR)

from calorie_logger.api.app import create_app  # noqa: E402
from calorie_logger.containers import build_container  # noqa: E402

app = create_app(build_container())
