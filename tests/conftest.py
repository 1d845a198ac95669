import os
import sys
from pathlib import Path

# Project sources and the shared fakes module
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

# Keep stray defaults out of the working tree; tests pass explicit paths anyway.
os.environ.setdefault("SESSION_DIR", str(ROOT / ".pytest_storage" / "sessions"))
os.environ.setdefault("STORE_FILE", str(ROOT / ".pytest_storage" / "store.json.gz"))
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.test")
os.environ.setdefault("SUPABASE_KEY", "test-service-key")
