
from __future__ import annotations
import json, importlib.resources as ir
from typing import Any, Dict, List
TABLES = ("tests", "test_questions", "courses", "lessons", "users")
def load_seed() -> Dict[str, List[Dict[str, Any]]]:
    """Sample catalog keyed by table name, ready for ``JsonStore.seed(**tables)``."""
    data = ir.files(__package__).joinpath("data/seed.json").read_text(encoding="utf-8")
    raw = json.loads(data)
    return {name: list(raw.get(name, [])) for name in TABLES}
