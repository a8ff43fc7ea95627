# vulnscan_api/services/profile_catalog.py
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

import yaml

from vulnscan_api.core.config import settings

logger = logging.getLogger(__name__)

FULL_SCAN_PROFILE_ID = "11111111-1111-1111-1111-111111111111"

# Used when the catalogue file cannot be read
DEFAULT_CATALOG: Dict[str, Any] = {
    "scan_types": [
        {"id": "full", "name": "Full Scan", "profile_id": FULL_SCAN_PROFILE_ID},
        {"id": "quick", "name": "High Risk Vulnerabilities", "profile_id": "11111111-1111-1111-1111-111111111112"},
        {"id": "custom", "name": "Custom Profile", "profile_id": FULL_SCAN_PROFILE_ID},
    ],
    "report_templates": [
        {"id": "pdf", "name": "Developer", "template_id": "11111111-1111-1111-1111-111111111111"},
        {"id": "executive", "name": "Quick", "template_id": "11111111-1111-1111-1111-111111111112"},
    ],
    "default_scan_type": "full",
    "default_report_type": "pdf",
    "fallback_report_type": "executive",
}


@lru_cache()
def load_catalog(path: Optional[str] = None) -> Dict[str, Any]:
    path = path or settings.SCAN_PROFILES_FILE
    try:
        with open(path, 'r') as f:
            catalog = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Could not load scan profile catalogue '{path}': {e}")
        return DEFAULT_CATALOG
    for key, value in DEFAULT_CATALOG.items():
        catalog.setdefault(key, value)
    return catalog


def _find(entries, entry_id):
    return next((e for e in entries if e.get("id") == entry_id), None)


def resolve_profile_id(scan_type: str, profile_id: Optional[str] = None, catalog: Optional[Dict[str, Any]] = None) -> str:
    """Map a scan type to an engine profile id; unknown types use the default (full) profile."""
    catalog = catalog or load_catalog()
    if scan_type == "custom" and profile_id:
        return profile_id
    entry = _find(catalog["scan_types"], scan_type) or _find(catalog["scan_types"], catalog["default_scan_type"])
    return entry["profile_id"] if entry else FULL_SCAN_PROFILE_ID


def resolve_template_id(report_type: str, catalog: Optional[Dict[str, Any]] = None) -> str:
    catalog = catalog or load_catalog()
    entry = _find(catalog["report_templates"], report_type) or _find(catalog["report_templates"], catalog["fallback_report_type"])
    if not entry:
        raise ValueError(f"Unknown report type: {report_type}")
    return entry["template_id"]
