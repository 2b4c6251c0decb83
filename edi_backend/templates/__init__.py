"""Payer profiles for claim and eligibility generation.

Each YAML file in this directory describes one payer: the clearinghouse or
payer that receives the interchange, the payer identity printed in the
claim, and default codes. Applying a profile fills in whatever a request
payload leaves out, so API clients only send the claim itself.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent


def list_payer_profiles() -> list[dict[str, Any]]:
    """Get list of available payer profiles.

    Returns:
        List of profile metadata (id, name, description, category).
    """
    profiles = []
    for file_path in TEMPLATES_DIR.glob("*.yaml"):
        try:
            with open(file_path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Skipping unreadable payer profile {file_path.name}: {e}")
            continue
        if data and isinstance(data, dict):
            profiles.append(
                {
                    "id": file_path.stem,
                    "name": data.get("name", file_path.stem),
                    "description": data.get("description", ""),
                    "category": data.get("category", "commercial"),
                }
            )

    return sorted(profiles, key=lambda x: x["name"])


def get_payer_profile(profile_id: str) -> dict[str, Any] | None:
    """Get a specific payer profile by ID.

    Args:
        profile_id: The profile file name (without extension)

    Returns:
        Profile dict, or None if not found.
    """
    # Reject anything that could escape the profile directory
    if ".." in profile_id or "/" in profile_id or "\\" in profile_id:
        return None

    file_path = TEMPLATES_DIR / f"{profile_id}.yaml"
    if not file_path.exists():
        return None

    try:
        with open(file_path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load payer profile {profile_id}: {e}")
        return None
    return data if isinstance(data, dict) else None


def apply_payer_profile(
    profile_id: str, payload: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Fill a generator payload with a payer profile's defaults.

    Values already present in the payload win. Nested mappings (receiver,
    payer) are filled key by key.

    Args:
        profile_id: The profile ID to apply
        payload: Claim or inquiry payload

    Returns:
        New payload dict; the input is not modified.

    Raises:
        ValueError: If profile not found.
    """
    profile = get_payer_profile(profile_id)
    if not profile:
        raise ValueError(f"Payer profile not found: {profile_id}")

    merged = copy.deepcopy(payload or {})
    for key, value in (profile.get("defaults") or {}).items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            for sub_key, sub_value in value.items():
                if not current.get(sub_key):
                    current[sub_key] = copy.deepcopy(sub_value)
        elif current is None or current == "":
            merged[key] = copy.deepcopy(value)

    return merged
