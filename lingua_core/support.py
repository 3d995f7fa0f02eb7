from __future__ import annotations
from typing import Any, Dict, Optional

REQUIRED = ("name", "email", "subject", "message")


def submit_support_message(
    store,
    name: str,
    email: str,
    subject: str,
    message: str,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Store a contact-form message with status ``new``.

    Raises ValueError for blank fields; StoreError if the write fails.
    """
    fields = {"name": name, "email": email, "subject": subject, "message": message}
    blank = [k for k in REQUIRED if not (fields[k] or "").strip()]
    if blank:
        raise ValueError(f"missing {', '.join(blank)}")
    if "@" not in email:
        raise ValueError("email address looks invalid")
    row = {k: v.strip() for k, v in fields.items()}
    row["user_id"] = user_id or None
    return store.insert_support_message(row)
