"""Convert ASO records between store locale codes and unified locale codes.

An ASO record looks like::

    {
        "googlePlay": {"locales": {"ko-KR": {...}}, "defaultLocale": "en-US", ...},
        "appStore": {"locales": {"ko": {...}}, "defaultLocale": "en-US", ...},
    }

Pulled data is keyed by store codes; the local copy is keyed by unified
locales. Older single-locale records (no ``locales`` key) are accepted and
treated as a one-locale map.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .locales import DEFAULT_LOCALE, Store, store_to_unified, unified_to_store

# Per-locale field that repeats the locale code, per store.
LOCALE_FIELDS = {
    Store.GOOGLE_PLAY: "defaultLanguage",
    Store.APP_STORE: "locale",
}

PULL_DATA_DIRS = {
    Store.GOOGLE_PLAY: "google-play",
    Store.APP_STORE: "app-store",
}


def is_multilingual(data: Optional[Dict[str, Any]]) -> bool:
    return data is not None and "locales" in data


def _locale_map(store: Store, data: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    if is_multilingual(data):
        return dict(data["locales"])
    return {data.get(LOCALE_FIELDS[store]) or DEFAULT_LOCALE: data}


def _default_locale(store: Store, data: Dict[str, Any]) -> str:
    if is_multilingual(data):
        return data.get("defaultLocale") or DEFAULT_LOCALE
    return data.get(LOCALE_FIELDS[store]) or DEFAULT_LOCALE


def _app_level(data: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    if not is_multilingual(data):
        return {}
    return {key: data[key] for key in keys if data.get(key) is not None}


def _store_to_public(store: Store, data: Dict[str, Any]) -> Dict[str, Any]:
    locale_field = LOCALE_FIELDS[store]
    converted: Dict[str, Dict[str, Any]] = {}
    for code, entry in _locale_map(store, data).items():
        unified = store_to_unified(store, code)
        if unified is None:
            logging.warning("Unknown %s locale %s; dropping it.", store.value, code)
            continue
        converted[unified] = {**entry, locale_field: unified}

    default = _default_locale(store, data)
    result = {
        "locales": converted,
        "defaultLocale": store_to_unified(store, default) or default,
    }
    if store is Store.GOOGLE_PLAY:
        result.update(_app_level(data, "contactEmail", "contactWebsite", "youtubeUrl"))
    else:
        result.update(
            _app_level(
                data, "contactEmail", "supportUrl", "marketingUrl", "privacyPolicyUrl", "termsUrl"
            )
        )
    return result


def aso_to_public(aso_data: Dict[str, Any]) -> Dict[str, Any]:
    """Pulled (store-keyed) ASO data to unified locale keys."""
    result: Dict[str, Any] = {}
    for store in Store:
        data = aso_data.get(store.value)
        if data:
            result[store.value] = _store_to_public(store, data)
    if "lastSynced" in aso_data:
        result["lastSynced"] = aso_data["lastSynced"]
    return result


def _google_play_for_push(data: Dict[str, Any]) -> Dict[str, Any]:
    youtube_url = data.get("youtubeUrl") if is_multilingual(data) else data.get("video")
    converted: Dict[str, Dict[str, Any]] = {}
    for unified, entry in _locale_map(Store.GOOGLE_PLAY, data).items():
        code = unified_to_store(Store.GOOGLE_PLAY, unified)
        if code is None:
            logging.warning("Google Play has no locale for %s; not pushing it.", unified)
            continue
        converted[code] = {
            **entry,
            "defaultLanguage": code,
            "video": entry.get("video") or youtube_url,
        }

    default = _default_locale(Store.GOOGLE_PLAY, data)
    return {
        "locales": converted,
        "defaultLocale": unified_to_store(Store.GOOGLE_PLAY, default) or default,
        "contactEmail": data.get("contactEmail") if is_multilingual(data) else None,
        "contactWebsite": data.get("contactWebsite") if is_multilingual(data) else None,
        "youtubeUrl": youtube_url,
    }


def _app_store_for_push(data: Dict[str, Any]) -> Dict[str, Any]:
    multilingual = is_multilingual(data)
    support_url = data.get("supportUrl") if multilingual else None
    marketing_url = data.get("marketingUrl") if multilingual else None
    converted: Dict[str, Dict[str, Any]] = {}
    for unified, entry in _locale_map(Store.APP_STORE, data).items():
        code = unified_to_store(Store.APP_STORE, unified)
        if code is None:
            logging.warning("App Store has no locale for %s; not pushing it.", unified)
            continue
        converted[code] = {
            **entry,
            "locale": code,
            "supportUrl": entry.get("supportUrl") or support_url,
            "marketingUrl": entry.get("marketingUrl") or marketing_url,
        }

    default = _default_locale(Store.APP_STORE, data)
    return {
        "locales": converted,
        "defaultLocale": unified_to_store(Store.APP_STORE, default) or default,
        "contactEmail": data.get("contactEmail") if multilingual else None,
        "supportUrl": support_url,
        "marketingUrl": marketing_url,
        "privacyPolicyUrl": data.get("privacyPolicyUrl") if multilingual else None,
        "termsUrl": data.get("termsUrl") if multilingual else None,
    }


def public_to_aso(aso_data: Dict[str, Any]) -> Dict[str, Any]:
    """Unified-keyed ASO data to store locale keys, ready to push.

    Locales a store doesn't support are dropped. App-level video and URLs
    fill in per-locale fields that are missing.
    """
    store_data: Dict[str, Any] = {}
    if aso_data.get(Store.GOOGLE_PLAY.value):
        store_data[Store.GOOGLE_PLAY.value] = _google_play_for_push(aso_data[Store.GOOGLE_PLAY.value])
    if aso_data.get(Store.APP_STORE.value):
        store_data[Store.APP_STORE.value] = _app_store_for_push(aso_data[Store.APP_STORE.value])
    return store_data


def load_pull_data(pull_data_dir: Path, slug: str) -> Dict[str, Any]:
    """Read ``products/{slug}/store/{store}/aso-data.json`` for both stores."""
    aso_data: Dict[str, Any] = {}
    for store, dirname in PULL_DATA_DIRS.items():
        path = Path(pull_data_dir) / "products" / slug / "store" / dirname / "aso-data.json"
        if not path.exists():
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Failed to read {store.value} data from {path}: {exc}") from exc
        if data.get(store.value):
            aso_data[store.value] = data[store.value]
    return aso_data
