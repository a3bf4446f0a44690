from __future__ import annotations

from typing import Optional


# ─────────────────────────────────────────────
# REMOTE ASSETS
# ─────────────────────────────────────────────

def is_remote(path: Optional[str]) -> bool:
    return bool(path) and path.lower().startswith(("http://", "https://"))


def resolve_asset_url(asset_base: str, path: Optional[str]) -> Optional[str]:
    """
    Turn a server-relative asset path into an absolute URL.

    ``uploads/stamp1.png`` + ``https://cdn.example.com``
    → ``https://cdn.example.com/uploads/stamp1.png``.
    Empty paths resolve to None; absolute URLs are returned unchanged.
    """
    if path is None:
        return None
    path = str(path).strip()
    if not path or path.lower() in {"null", "undefined", "none"}:
        return None
    if is_remote(path):
        return path
    if not asset_base:
        return path
    return f"{asset_base.rstrip('/')}/{path.lstrip('/')}"
