import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[3]

paths = [
    ROOT / "packages" / "adapter-sdk" / "src",
    ROOT / "packages" / "adapter-sqlalchemy" / "src",
    ROOT / "packages" / "adapters" / "mock" / "src",
    ROOT / "packages" / "core" / "src",
    ROOT / "packages" / "cli" / "src",
]

for path in paths:
    sys.path.insert(0, str(path))
