from __future__ import annotations
import argparse
from lingua_core.config import DATA_DIR
from lingua_core.seed import load_seed
from lingua_core.store import JsonStore

def main():
    ap = argparse.ArgumentParser(description="Write the bundled sample catalog into a data directory.")
    ap.add_argument("--data-dir", default=DATA_DIR)
    ap.add_argument("--force", action="store_true", help="overwrite an existing catalog")
    args = ap.parse_args()

    store = JsonStore(args.data_dir)
    if not store.is_empty() and not args.force:
        print(f"Catalog already present in {store.root} (use --force to overwrite).")
        return
    tables = load_seed()
    store.seed(**tables)
    counts = ", ".join(f"{len(rows)} {name}" for name, rows in tables.items())
    print(f"Seeded {counts} into {store.root}")

if __name__ == "__main__":
    main()
