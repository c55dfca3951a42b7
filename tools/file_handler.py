"""
File Handler Tool — loads the list of companies to track.
"""

import yaml

from config.log import get_logger
from models.company import CompanyKey
from models.enums import Provider

log = get_logger(__name__)


def load_companies(yaml_path: str) -> list[CompanyKey]:
    """
    Load tracked companies from a YAML file.

    Expected layout:
        companies:
          - id: airbnb
            provider: greenhouse

    Args:
        yaml_path: Path to the companies YAML file.

    Returns:
        List of company keys; invalid entries are skipped with a warning.
    """
    with open(yaml_path, "r") as f:
        data = yaml.safe_load(f) or {}

    keys = []
    seen = set()

    for entry in data.get("companies", []):
        id = str(entry.get("id", "")).strip() if isinstance(entry, dict) else ""
        provider = entry.get("provider") if isinstance(entry, dict) else None

        if not id or provider not in {p.value for p in Provider}:
            log.warning("Skipping invalid company entry: %r", entry)
            continue

        key = CompanyKey(id=id, provider=provider)
        if key in seen:
            continue
        seen.add(key)
        keys.append(key)

    return keys
