"""Decide which translation groups a product needs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .locales import (
    TRANSLATION_GROUPS,
    TranslationGroup,
    group_members,
    sort_locales,
    unified_to_translation_group,
)


@dataclass(frozen=True)
class LocalePlan:
    targets: Tuple[TranslationGroup, ...]
    locale_mapping: Dict[TranslationGroup, Tuple[str, ...]]
    skipped: Tuple[str, ...]
    grouped: Tuple[str, ...]
    invalid: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.targets

    def output_locales(self) -> List[str]:
        """Every unified locale that will receive an image, in target order."""
        return [locale for target in self.targets for locale in self.locale_mapping[target]]


def plan_locales(
    all_locales: Iterable[str],
    primary_locale: str,
    requested_targets: Optional[Iterable[str]] = None,
) -> LocalePlan:
    """Group a product's locales into translation calls.

    ``requested_targets`` narrows the candidates; requested locales the
    product doesn't have end up in ``invalid``. The primary locale is never a
    target. Locales the image model can't render go to ``skipped``.
    Ordering comes from the registry, so the result doesn't depend on the
    order of the inputs.
    """
    available = set(all_locales)
    candidates = set(available)
    invalid: List[str] = []

    requested = list(requested_targets or [])
    if requested:
        invalid = sort_locales(locale for locale in requested if locale not in available)
        if invalid:
            logging.warning(
                "Requested locales not in product, ignoring: %s", ", ".join(invalid)
            )
        candidates = {locale for locale in requested if locale in available}

    candidates.discard(primary_locale)

    skipped: List[str] = []
    wanted: Dict[TranslationGroup, set] = {}
    for locale in sort_locales(candidates):
        group = unified_to_translation_group(locale)
        if group is None:
            skipped.append(locale)
            continue
        wanted.setdefault(group, set()).add(locale)

    if skipped:
        logging.warning(
            "Locales not supported by the image model, skipping: %s", ", ".join(skipped)
        )

    targets = tuple(group for group in TRANSLATION_GROUPS if group in wanted)
    locale_mapping = {
        group: tuple(locale for locale in group_members(group) if locale in wanted[group])
        for group in targets
    }
    grouped = tuple(
        locale
        for group in targets
        for locale in locale_mapping[group][1:]
    )

    return LocalePlan(
        targets=targets,
        locale_mapping=locale_mapping,
        skipped=tuple(skipped),
        grouped=grouped,
        invalid=tuple(invalid),
    )
