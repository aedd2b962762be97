"""Forward migrations for the settings file.

Each step takes the raw JSON payload of one version and returns the payload
of the next one. ``migrate_settings`` applies all steps up to the current
version.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Tuple

from aistudio.utils.log import get_logger

logger = get_logger()

CURRENT_VERSION = "V3"


def _migrate_v1_to_v2(payload: Dict[str, Any]) -> Dict[str, Any]:
    """V1 providers had no numbers; number them in list order."""
    providers: List[Dict[str, Any]] = [
        dict(p) for p in payload.get("providers", []) if isinstance(p, dict)
    ]
    for index, provider in enumerate(providers, start=1):
        provider.setdefault("num", index)
    next_num = max((int(p.get("num", 0)) for p in providers), default=0) + 1
    return {
        **payload,
        "version": "V2",
        "providers": providers,
        "next_provider_num": max(int(payload.get("next_provider_num", 1)), next_num),
    }


def _migrate_v2_to_v3(payload: Dict[str, Any]) -> Dict[str, Any]:
    """V2 self-hosted providers always talked to LM Studio."""
    providers: List[Dict[str, Any]] = []
    for raw in payload.get("providers", []):
        if not isinstance(raw, dict):
            continue
        provider = dict(raw)
        if provider.get("used_provider") == "self_hosted":
            provider["is_self_hosted"] = True
            if provider.get("host") in (None, "", "none"):
                provider["host"] = "lm_studio"
        providers.append(provider)
    return {**payload, "version": "V3", "providers": providers}


_MIGRATIONS: Tuple[Tuple[str, Callable[[Dict[str, Any]], Dict[str, Any]]], ...] = (
    ("V1", _migrate_v1_to_v2),
    ("V2", _migrate_v2_to_v3),
)


def migrate_settings(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Upgrade a raw settings payload to the current version.

    A payload without a version is treated as V1. Unknown versions raise
    ``ValueError`` so the caller can fall back to defaults.
    """
    version = payload.get("version") or "V1"
    known = [source for source, _ in _MIGRATIONS] + [CURRENT_VERSION]
    if version not in known:
        raise ValueError(f"Unknown settings version '{version}'")

    migrated = dict(payload)
    migrated["version"] = version
    for source, step in _MIGRATIONS:
        if migrated["version"] != source:
            continue
        migrated = step(migrated)
        logger.info(
            "[settings] Migrated settings",
            extra={"from_version": source, "to_version": migrated["version"]},
        )
    return migrated
