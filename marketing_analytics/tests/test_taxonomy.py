"""
Test suite for the source taxonomy classifier.
"""

import pytest

from marketing_analytics.models.enums import CanonicalSource
from marketing_analytics.services.taxonomy import (
    DEFAULT_SOURCE_TAXONOMY,
    SourceClassifier,
    canonical_source,
)


class TestDefaultTaxonomy:

    @pytest.mark.parametrize('label,expected', [
        ('google', CanonicalSource.ORGANIC),
        ('Bing', CanonicalSource.ORGANIC),
        ('DuckDuckGo', CanonicalSource.ORGANIC),
        ('yahoo', CanonicalSource.ORGANIC),
        ('organic', CanonicalSource.ORGANIC),
        ('facebook', CanonicalSource.PAID),
        ('Instagram', CanonicalSource.PAID),
        ('linkedin', CanonicalSource.PAID),
        ('twitter', CanonicalSource.PAID),
        ('tiktok', CanonicalSource.PAID),
        ('paid', CanonicalSource.PAID),
        ('direct', CanonicalSource.DIRECT),
        ('email', CanonicalSource.EMAIL),
        ('Newsletter', CanonicalSource.EMAIL),
        ('referral', CanonicalSource.REFERRAL),
    ])
    def test_known_labels(self, label: str, expected: CanonicalSource) -> None:
        assert canonical_source(label) is expected

    def test_whitespace_and_case_ignored(self) -> None:
        assert canonical_source('  GOOGLE \n') is CanonicalSource.ORGANIC

    @pytest.mark.parametrize('label', [None, '', '   ', 'partner-site', 'google ads', 42])
    def test_unmapped_is_other(self, label) -> None:
        assert canonical_source(label) is CanonicalSource.OTHER

    def test_every_default_entry_is_lowercase(self) -> None:
        assert all(label == label.strip().lower() for label in DEFAULT_SOURCE_TAXONOMY)


class TestInjectedTaxonomy:

    def test_custom_mapping_replaces_default(self) -> None:
        classifier = SourceClassifier({'Partner_Portal': CanonicalSource.REFERRAL})
        assert classifier.classify(' partner_portal ') is CanonicalSource.REFERRAL
        assert classifier.classify('google') is CanonicalSource.OTHER

    def test_string_channels_are_coerced(self) -> None:
        classifier = SourceClassifier({'hn': 'referral'})
        assert classifier('HN') is CanonicalSource.REFERRAL

    def test_empty_mapping_classifies_everything_as_other(self) -> None:
        classifier = SourceClassifier({})
        assert classifier.classify('google') is CanonicalSource.OTHER
