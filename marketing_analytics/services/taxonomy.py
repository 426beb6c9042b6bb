"""
Source Taxonomy Classifier.

Maps free-text acquisition labels ("Google", " newsletter ", "LinkedIn") onto
the fixed set of canonical channels used by the dashboard:

    organic | paid | direct | email | referral | other

Matching is case-insensitive and ignores surrounding whitespace. Labels that
are missing or not in the lookup table fall into ``other``.

The lookup table is injectable so tests and alternative deployments can swap
it without touching module state:

    classifier = SourceClassifier({'partner_portal': CanonicalSource.REFERRAL})
    classifier.classify('Partner_Portal')  # CanonicalSource.REFERRAL
"""

from typing import Any, Dict, Mapping, Optional

from marketing_analytics.models.enums import CanonicalSource


DEFAULT_SOURCE_TAXONOMY: Dict[str, CanonicalSource] = {
    'google': CanonicalSource.ORGANIC,
    'bing': CanonicalSource.ORGANIC,
    'duckduckgo': CanonicalSource.ORGANIC,
    'yahoo': CanonicalSource.ORGANIC,
    'organic': CanonicalSource.ORGANIC,
    'facebook': CanonicalSource.PAID,
    'instagram': CanonicalSource.PAID,
    'linkedin': CanonicalSource.PAID,
    'twitter': CanonicalSource.PAID,
    'tiktok': CanonicalSource.PAID,
    'paid': CanonicalSource.PAID,
    'direct': CanonicalSource.DIRECT,
    'email': CanonicalSource.EMAIL,
    'newsletter': CanonicalSource.EMAIL,
    'referral': CanonicalSource.REFERRAL,
}


def _normalize_label(raw: Any) -> str:
    if raw is None:
        return ''
    return str(raw).strip().lower()


class SourceClassifier:
    """Static lookup from normalized source label to canonical channel."""

    def __init__(self, mapping: Optional[Mapping[str, CanonicalSource]] = None):
        table = DEFAULT_SOURCE_TAXONOMY if mapping is None else mapping
        self._mapping: Dict[str, CanonicalSource] = {
            _normalize_label(label): CanonicalSource(channel)
            for label, channel in table.items()
        }

    def classify(self, raw: Any) -> CanonicalSource:
        label = _normalize_label(raw)
        if not label:
            return CanonicalSource.OTHER
        return self._mapping.get(label, CanonicalSource.OTHER)

    __call__ = classify


default_classifier = SourceClassifier()


def canonical_source(raw: Any) -> CanonicalSource:
    """Classify ``raw`` with the default taxonomy."""
    return default_classifier.classify(raw)
