"""
Property-based tests for candidate extraction from free text.
"""

import string

from hypothesis import given, settings, assume
from hypothesis import strategies as st

from domain_sweep.word_extractor import extract_words, normalize_candidate


def domain_strategy() -> st.SearchStrategy[str]:
    label = st.text(alphabet=string.ascii_lowercase + string.digits, min_size=1, max_size=10)
    return st.builds(
        lambda labels, tld: ".".join(labels + [tld]),
        st.lists(label, min_size=1, max_size=3),
        st.sampled_from(["com", "net", "io"]),
    )


class TestExtractionProperty:
    """
    Property 1: Domains embedded in text are found intact.
    """

    @given(
        domains=st.lists(domain_strategy(), min_size=1, max_size=5),
        separators=st.lists(st.sampled_from([" ", ", ", "; ", "\t", " | ", " <", "> "]), min_size=5, max_size=5),
    )
    @settings(max_examples=100)
    def test_domains_survive_separators(self, domains: list[str], separators: list[str]) -> None:
        """
        *For any* domains joined by punctuation and whitespace, extraction
        SHALL return exactly those domains in order.
        """
        text = ""
        for domain, separator in zip(domains, separators):
            text += domain + separator

        assert extract_words(text) == domains

    def test_mixed_text(self) -> None:
        text = "Try Example.COM, foo-bar.org or https://www.site.io/path!"
        assert extract_words(text) == [
            "Try", "Example.COM", "foo-bar.org", "or", "https", "www.site.io", "path",
        ]

    def test_leading_dot_is_kept(self) -> None:
        assert extract_words("(.com)") == [".com"]

    @given(text=st.text(alphabet=" ,;!?()[]{}\t", max_size=30))
    @settings(max_examples=30)
    def test_no_words_in_punctuation(self, text: str) -> None:
        assert extract_words(text) == []

    def test_empty_input(self) -> None:
        assert extract_words("") == []
        assert extract_words(None) == []


class TestNormalizationProperty:
    """
    Property 2: Candidates are trimmed, lowercased and stripped of "www.".
    """

    @given(domain=domain_strategy(), prefix=st.sampled_from(["", "www.", "WWW.", "Www."]))
    @settings(max_examples=100)
    def test_www_prefix_is_dropped(self, domain: str, prefix: str) -> None:
        assume(not domain.startswith("www."))
        assert normalize_candidate(f"  {prefix}{domain.upper()} ") == domain

    def test_nothing_left(self) -> None:
        assert normalize_candidate("   ") is None
        assert normalize_candidate("www.") is None

    def test_only_one_prefix_is_dropped(self) -> None:
        assert normalize_candidate("www.www.example.com") == "www.example.com"
