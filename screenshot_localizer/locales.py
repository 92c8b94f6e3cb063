"""Locale tables: unified locales, store locale codes and translation groups.

Three code spaces meet here:

* unified locales, the canonical codes used for everything stored locally
  (``locales/{code}.json``, ``screenshots/{code}/``);
* store codes, the ones App Store Connect and the Google Play Publisher API
  expect;
* translation groups, the locales the Gemini image model can render text
  in. Several unified locales share one group and therefore one image.

All tables are built once at import time and exposed read-only.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple


class Store(str, Enum):
    APP_STORE = "appStore"
    GOOGLE_PLAY = "googlePlay"


# (unified, App Store Connect, Google Play)
_LOCALE_TABLE: Tuple[Tuple[str, Optional[str], Optional[str]], ...] = (
    ("af", None, "af"),
    ("am", None, "am"),
    ("ar", "ar-SA", "ar"),
    ("az-AZ", None, "az-AZ"),
    ("be", None, "be"),
    ("bg", None, "bg"),
    ("bn-BD", None, "bn-BD"),
    ("ca", "ca", "ca"),
    ("cs-CZ", "cs", "cs-CZ"),
    ("da-DK", "da", "da-DK"),
    ("de-DE", "de-DE", "de-DE"),
    ("el-GR", "el", "el-GR"),
    ("en-AU", "en-AU", "en-AU"),
    ("en-CA", "en-CA", "en-CA"),
    ("en-GB", "en-GB", "en-GB"),
    ("en-IN", None, "en-IN"),
    ("en-SG", None, "en-SG"),
    ("en-US", "en-US", "en-US"),
    ("en-ZA", None, "en-ZA"),
    ("es-419", "es-MX", "es-419"),
    ("es-ES", "es-ES", "es-ES"),
    ("es-US", None, "es-US"),
    ("et", None, "et"),
    ("fa", None, "fa"),
    ("fi-FI", "fi", "fi-FI"),
    ("fil", None, "fil"),
    ("fr-CA", "fr-CA", "fr-CA"),
    ("fr-FR", "fr-FR", "fr-FR"),
    ("he-IL", "he", "iw-IL"),
    ("hi-IN", "hi", "hi-IN"),
    ("hr-HR", "hr", "hr"),
    ("hu-HU", "hu", "hu-HU"),
    ("hy-AM", None, "hy-AM"),
    ("id-ID", "id", "id"),
    ("is-IS", None, "is-IS"),
    ("it-IT", "it", "it-IT"),
    ("ja-JP", "ja", "ja-JP"),
    ("ka-GE", None, "ka-GE"),
    ("kk", None, "kk"),
    ("km-KH", None, "km-KH"),
    ("ko-KR", "ko", "ko-KR"),
    ("lt", None, "lt"),
    ("lv", None, "lv"),
    ("ms-MY", "ms", "ms-MY"),
    ("nl-NL", "nl-NL", "nl-NL"),
    ("no-NO", "no", "no-NO"),
    ("pl-PL", "pl", "pl-PL"),
    ("pt-BR", "pt-BR", "pt-BR"),
    ("pt-PT", "pt-PT", "pt-PT"),
    ("ro-RO", "ro", "ro"),
    ("ru-RU", "ru", "ru-RU"),
    ("sk-SK", "sk", "sk"),
    ("sl-SI", None, "sl"),
    ("sr", None, "sr"),
    ("sv-SE", "sv", "sv-SE"),
    ("sw", None, "sw"),
    ("ta-IN", None, "ta-IN"),
    ("te-IN", None, "te-IN"),
    ("th-TH", "th", "th"),
    ("tr-TR", "tr", "tr-TR"),
    ("uk-UA", "uk", "uk"),
    ("ur", None, "ur"),
    ("vi-VN", "vi", "vi"),
    ("zh-HK", None, "zh-HK"),
    ("zh-Hans", "zh-Hans", "zh-CN"),
    ("zh-Hant", "zh-Hant", "zh-TW"),
    ("zu", None, "zu"),
)

DEFAULT_LOCALE = "en-US"

UNIFIED_LOCALES: Tuple[str, ...] = tuple(row[0] for row in _LOCALE_TABLE)

_LOCALE_ORDER: Mapping[str, int] = MappingProxyType(
    {locale: idx for idx, locale in enumerate(UNIFIED_LOCALES)}
)


def _build_store_tables() -> Tuple[Mapping[Store, Mapping[str, str]], Mapping[Store, Mapping[str, str]]]:
    forward: Dict[Store, Dict[str, str]] = {Store.APP_STORE: {}, Store.GOOGLE_PLAY: {}}
    reverse: Dict[Store, Dict[str, str]] = {Store.APP_STORE: {}, Store.GOOGLE_PLAY: {}}
    for unified, app_store, google_play in _LOCALE_TABLE:
        for store, code in ((Store.APP_STORE, app_store), (Store.GOOGLE_PLAY, google_play)):
            if code is None:
                continue
            if code in reverse[store]:
                raise RuntimeError(f"Duplicate {store.value} locale code: {code}")
            forward[store][unified] = code
            reverse[store][code] = unified
    return (
        MappingProxyType({store: MappingProxyType(table) for store, table in forward.items()}),
        MappingProxyType({store: MappingProxyType(table) for store, table in reverse.items()}),
    )


_UNIFIED_TO_STORE, _STORE_TO_UNIFIED = _build_store_tables()

APP_STORE_LOCALES: Tuple[str, ...] = tuple(_STORE_TO_UNIFIED[Store.APP_STORE])
GOOGLE_PLAY_LOCALES: Tuple[str, ...] = tuple(_STORE_TO_UNIFIED[Store.GOOGLE_PLAY])


def is_unified_locale(locale: str) -> bool:
    return locale in _LOCALE_ORDER


def is_app_store_locale(code: str) -> bool:
    return code in _STORE_TO_UNIFIED[Store.APP_STORE]


def is_google_play_locale(code: str) -> bool:
    return code in _STORE_TO_UNIFIED[Store.GOOGLE_PLAY]


def unified_to_store(store: Store, locale: str) -> Optional[str]:
    """Store code for a unified locale, or None when the store lacks it."""
    return _UNIFIED_TO_STORE[Store(store)].get(locale)


def store_to_unified(store: Store, code: str) -> Optional[str]:
    return _STORE_TO_UNIFIED[Store(store)].get(code)


def unified_to_app_store(locale: str) -> Optional[str]:
    return unified_to_store(Store.APP_STORE, locale)


def unified_to_google_play(locale: str) -> Optional[str]:
    return unified_to_store(Store.GOOGLE_PLAY, locale)


def app_store_to_unified(code: str) -> Optional[str]:
    return store_to_unified(Store.APP_STORE, code)


def google_play_to_unified(code: str) -> Optional[str]:
    return store_to_unified(Store.GOOGLE_PLAY, code)


def locale_sort_key(locale: str) -> Tuple[int, str]:
    """Declaration order for known locales, unknown codes last and alphabetical."""
    return (_LOCALE_ORDER.get(locale, len(_LOCALE_ORDER)), locale)


# --- Translation groups (Gemini image model) ---


class TranslationGroup(str, Enum):
    """Locale codes the image model accepts, exactly as it expects them."""

    EN_US = "en-US"
    AR_EG = "ar-EG"
    DE_DE = "de-DE"
    ES_MX = "es-MX"
    FR_FR = "fr-FR"
    HI_IN = "hi-IN"
    ID_ID = "id-ID"
    IT_IT = "it-IT"
    JA_JP = "ja-JP"
    KO_KR = "ko-KR"
    PT_BR = "pt-BR"
    RU_RU = "ru-RU"
    # Gemini says ua-UA, the unified code is uk-UA.
    UA_UA = "ua-UA"
    VI_VN = "vi-VN"
    ZH_CN = "zh-CN"


# The first member is the one listed first in reports; every member receives
# the same image. Simplified, Traditional and Hong Kong Chinese share one
# render, which is an approximation for in-image text.
TRANSLATION_GROUPS: Mapping[TranslationGroup, Tuple[str, ...]] = MappingProxyType(
    {
        TranslationGroup.EN_US: ("en-US", "en-AU", "en-CA", "en-GB", "en-IN", "en-SG", "en-ZA"),
        TranslationGroup.AR_EG: ("ar",),
        TranslationGroup.DE_DE: ("de-DE",),
        TranslationGroup.ES_MX: ("es-419", "es-ES", "es-US"),
        TranslationGroup.FR_FR: ("fr-FR", "fr-CA"),
        TranslationGroup.HI_IN: ("hi-IN",),
        TranslationGroup.ID_ID: ("id-ID",),
        TranslationGroup.IT_IT: ("it-IT",),
        TranslationGroup.JA_JP: ("ja-JP",),
        TranslationGroup.KO_KR: ("ko-KR",),
        TranslationGroup.PT_BR: ("pt-BR", "pt-PT"),
        TranslationGroup.RU_RU: ("ru-RU",),
        TranslationGroup.UA_UA: ("uk-UA",),
        TranslationGroup.VI_VN: ("vi-VN",),
        TranslationGroup.ZH_CN: ("zh-Hans", "zh-Hant", "zh-HK"),
    }
)

LANGUAGE_NAMES: Mapping[TranslationGroup, str] = MappingProxyType(
    {
        TranslationGroup.EN_US: "English",
        TranslationGroup.AR_EG: "Arabic",
        TranslationGroup.DE_DE: "German",
        TranslationGroup.ES_MX: "Spanish",
        TranslationGroup.FR_FR: "French",
        TranslationGroup.HI_IN: "Hindi",
        TranslationGroup.ID_ID: "Indonesian",
        TranslationGroup.IT_IT: "Italian",
        TranslationGroup.JA_JP: "Japanese",
        TranslationGroup.KO_KR: "Korean",
        TranslationGroup.PT_BR: "Portuguese",
        TranslationGroup.RU_RU: "Russian",
        TranslationGroup.UA_UA: "Ukrainian",
        TranslationGroup.VI_VN: "Vietnamese",
        TranslationGroup.ZH_CN: "Chinese",
    }
)


def _build_group_index() -> Mapping[str, TranslationGroup]:
    index: Dict[str, TranslationGroup] = {}
    for group, members in TRANSLATION_GROUPS.items():
        for locale in members:
            if locale in index:
                raise RuntimeError(
                    f"{locale} is listed in both {index[locale].value} and {group.value}"
                )
            index[locale] = group
    return MappingProxyType(index)


_GROUP_BY_LOCALE = _build_group_index()


def unified_to_translation_group(locale: str) -> Optional[TranslationGroup]:
    """Group that translates ``locale``, or None when the model can't render it."""
    return _GROUP_BY_LOCALE.get(locale)


def group_members(group: TranslationGroup) -> Tuple[str, ...]:
    return TRANSLATION_GROUPS[TranslationGroup(group)]


def is_translatable(locale: str) -> bool:
    return locale in _GROUP_BY_LOCALE


def language_name(locale: str) -> str:
    """English language name for a group key or unified locale; falls back to the code."""
    try:
        group: Optional[TranslationGroup] = TranslationGroup(locale)
    except ValueError:
        group = unified_to_translation_group(locale)
    if group is None:
        return locale
    return LANGUAGE_NAMES[group]


def sort_locales(locales: Iterable[str]) -> List[str]:
    return sorted(set(locales), key=locale_sort_key)
