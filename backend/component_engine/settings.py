"""Engine runtime settings: tunable parameters for extraction and serialization.

All values read from environment variables with sensible defaults.
Import from here instead of hardcoding.

Connection config (site URL, resource type, credentials) stays
in component_engine/config.py.
"""

from __future__ import annotations

import os


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def _str(key: str, default: str) -> str:
    return os.getenv(key, default)


# =====================================================================
# Extraction (fetch → locate → normalize / synthesize)
# =====================================================================

# Outer attempt budget; only transport errors consume more than one
EXTRACTION_MAX_ATTEMPTS = _int("EXTRACTION_MAX_ATTEMPTS", 3)

# Backoff before attempt n+1 is EXTRACTION_BACKOFF_BASE ** n seconds (2s, 4s)
EXTRACTION_BACKOFF_BASE = _float("EXTRACTION_BACKOFF_BASE", 2.0)

# Field restriction sent with the edit-context request
WP_REQUEST_FIELDS = _str("WP_REQUEST_FIELDS", "id,title,meta")

# Elements nested deeper than this are cut off by the normalizer
TREE_MAX_DEPTH = _int("TREE_MAX_DEPTH", 64)


# =====================================================================
# HTTP Client (WordPress REST API)
# =====================================================================

# Per-attempt request timeout (seconds)
WP_HTTP_TIMEOUT = _float("WP_HTTP_TIMEOUT", 30.0)
WP_HTTP_MAX_CONNECTIONS = _int("WP_HTTP_MAX_CONNECTIONS", 5)
WP_HTTP_MAX_KEEPALIVE = _int("WP_HTTP_MAX_KEEPALIVE", 3)


# =====================================================================
# Clipboard output
# =====================================================================

# Indentation of the native builder clipboard JSON
NATIVE_CLIPBOARD_INDENT = _int("NATIVE_CLIPBOARD_INDENT", 2)

# Figma scene envelope versions
FIGMA_SCENE_VERSION = _str("FIGMA_SCENE_VERSION", "5.4")
FIGMA_METADATA_VERSION = _str("FIGMA_METADATA_VERSION", "1.0")
