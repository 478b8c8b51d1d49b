"""
Unit tests for the URL classifier.

Uses the site files shipped in sites/ and doesn't require network access.
"""

import unittest
from pathlib import Path

from classifiers import (
    INVALID_DOMAIN,
    INVALID_PATH,
    InvalidDomain,
    InvalidPath,
    UrlClassifier,
    Valid,
    slug_to_label,
)
from site_loader import SiteConfig, load_site

SITES_DIR = Path(__file__).resolve().parent.parent / "sites"


def classifier_for(file_name: str) -> UrlClassifier:
    return UrlClassifier(load_site(str(SITES_DIR / file_name)))


class TestSlugToLabel(unittest.TestCase):
    """Test label formatting."""

    def test_hyphens_and_underscores(self):
        """Separators should become spaces and words get capitalized."""
        self.assertEqual(slug_to_label("jav-uncensored"), "Jav Uncensored")
        self.assertEqual(slug_to_label("big_tits"), "Big Tits")

    def test_mixed_case_kept(self):
        """Mixed-case words should be left unchanged."""
        self.assertEqual(slug_to_label("iPhone-cases"), "iPhone Cases")

    def test_all_caps_kept(self):
        """Words without a lowercase first letter need no capitalizing."""
        self.assertEqual(slug_to_label("JULIA"), "JULIA")
        self.assertEqual(slug_to_label("JAV-uncensored"), "JAV Uncensored")

    def test_non_ascii_kept(self):
        """Non-ASCII words should be left unchanged."""
        self.assertEqual(slug_to_label("über-cool"), "über Cool")
        self.assertEqual(slug_to_label("波多野結衣"), "波多野結衣")

    def test_empty_and_repeated_separators(self):
        """Empty tokens give empty labels; separator runs collapse."""
        self.assertEqual(slug_to_label(""), "")
        self.assertEqual(slug_to_label("a--b"), "A B")


class TestDomainCheck(unittest.TestCase):
    """Test host matching."""

    def setUp(self):
        self.classifier = classifier_for("example_tube.yaml")

    def test_exact_and_www_hosts(self):
        """Exact domain and www. prefix are accepted case-insensitively."""
        expected = Valid("/categories/amateur/", "Category: Amateur")
        for url in [
            "https://example.com/categories/amateur",
            "https://www.example.com/categories/amateur",
            "HTTPS://WWW.Example.COM/categories/amateur",
            "http://example.com:8080/categories/amateur",
        ]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), expected)

    def test_other_hosts_rejected_even_with_matching_path(self):
        """Spoofed and unrelated hosts are InvalidDomain."""
        for url in [
            "https://example.com.evil.com/categories/amateur",
            "https://www.example.com.evil.com/categories/amateur",
            "https://evilexample.com/categories/amateur",
            "https://sub.example.com/categories/amateur",
            "https://example.org/categories/amateur",
            "https://example.com@evil.com/categories/amateur",
        ]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), INVALID_DOMAIN)

    def test_domain_checked_before_path(self):
        """A foreign host wins over a malformed or unknown path."""
        self.assertIsInstance(self.classifier.classify("https://other.com/%zz"), InvalidDomain)
        self.assertIsInstance(self.classifier.classify("https://other.com/"), InvalidDomain)


class TestInvalidPath(unittest.TestCase):
    """Test inputs that must be rejected as InvalidPath."""

    def setUp(self):
        self.classifier = classifier_for("example_tube.yaml")

    def test_blank_and_unparsable(self):
        """Blank, whitespace-only and non-URL input is InvalidPath."""
        for url in ["", "   ", "\t\n", "not a url", "example.com/categories/x",
                    "ftp://example.com/categories/x", "http://[::1", "https://"]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), INVALID_PATH)

    def test_non_string_input(self):
        """The classifier is total, even for wrong types."""
        self.assertEqual(self.classifier.classify(None), INVALID_PATH)

    def test_unmatched_paths(self):
        """Paths no route accepts are InvalidPath."""
        for url in ["https://example.com", "https://example.com/",
                    "https://example.com/unknown/x", "https://example.com/categories",
                    "https://example.com/categories/a/b/c"]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), INVALID_PATH)

    def test_malformed_percent_encoding(self):
        """Broken escapes and non-UTF-8 bytes are InvalidPath."""
        for url in ["https://example.com/categories/%zz",
                    "https://example.com/categories/abc%2",
                    "https://example.com/categories/%E9",
                    "https://example.com/search/?query=%G1"]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), INVALID_PATH)

    def test_blank_search_terms(self):
        """Search routes need a non-blank term."""
        for url in ["https://example.com/search/?query=",
                    "https://example.com/search/?query=%20%20",
                    "https://example.com/search/?query=+",
                    "https://example.com/search/",
                    "https://example.com/search/%20/"]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), INVALID_PATH)

    def test_overlong_url(self):
        """URLs over the length limit are rejected before matching."""
        url = "https://example.com/categories/" + "a" * 3000
        self.assertIsInstance(self.classifier.classify(url), InvalidPath)


class TestTubeSite(unittest.TestCase):
    """Directory-style site with trailing slashes."""

    def setUp(self):
        self.classifier = classifier_for("example_tube.yaml")

    def test_category(self):
        """Category URLs get a trailing slash and a prefixed label."""
        self.assertEqual(
            self.classifier.classify("https://example.com/categories/jav-uncensored"),
            Valid("/categories/jav-uncensored/", "Category: Jav Uncensored")
        )

    def test_pagination_stripped(self):
        """Numbered and /page/<n> suffixes are dropped."""
        expected = Valid("/categories/amateur/", "Category: Amateur")
        for url in ["https://example.com/categories/amateur/2/",
                    "https://example.com/categories/amateur/page/3",
                    "https://example.com/categories/amateur/?page=4"]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), expected)

    def test_fixed_pages(self):
        """Literal routes use their fixed label."""
        self.assertEqual(self.classifier.classify("https://example.com/top-rated"),
                         Valid("/top-rated/", "Top Rated"))
        self.assertEqual(self.classifier.classify("https://example.com/most-popular/5/"),
                         Valid("/most-popular/", "Most Viewed"))

    def test_irrelevant_query_and_fragment_dropped(self):
        """Only the matched route's query parameters survive."""
        self.assertEqual(
            self.classifier.classify("https://example.com/tags/retro/?utm_source=feed#top"),
            Valid("/tags/retro/", "Tag: Retro")
        )

    def test_search_query_encodings_normalize(self):
        """Equivalent encodings of a search term give the same entry."""
        expected = Valid("/search/?query=big+tits", "Search: Big Tits")
        for url in ["https://example.com/search/?query=big+tits",
                    "https://example.com/search/?query=big%20tits",
                    "https://example.com/search?query=big%20tits&sort=new"]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), expected)

    def test_path_search(self):
        """Path-style search decodes the term for the label."""
        self.assertEqual(
            self.classifier.classify("https://example.com/search/cute%20cats/"),
            Valid("/search/cute%20cats/", "Search: Cute Cats")
        )

    def test_classify_is_idempotent_on_canonical_paths(self):
        """Re-classifying a canonical path yields the same result."""
        for url in ["https://example.com/categories/jav-uncensored",
                    "https://www.example.com/models/some_model/7/",
                    "https://example.com/search/?query=red%20car&page=2",
                    "https://example.com/search/caf%C3%A9/",
                    "https://example.com/channels/a%2Fb"]:
            with self.subTest(url=url):
                first = self.classifier.classify(url)
                self.assertIsInstance(first, Valid)
                again = self.classifier.classify("https://example.com" + first.path)
                self.assertEqual(again, first)

    def test_validate_and_call_aliases(self):
        """validate() and calling the classifier match classify()."""
        url = "https://example.com/tags/retro"
        self.assertEqual(self.classifier.validate(url), self.classifier.classify(url))
        self.assertEqual(self.classifier(url), self.classifier.classify(url))


class TestPressSite(unittest.TestCase):
    """WordPress-style site without trailing slashes."""

    def setUp(self):
        self.classifier = classifier_for("example_press.yaml")

    def test_trailing_slash_removed(self):
        """The site's convention is applied whatever the input looks like."""
        expected = Valid("/category/amateur", "Category: Amateur")
        for url in ["https://example.org/category/amateur",
                    "https://example.org/category/amateur/",
                    "https://example.org/category/amateur/page/2/"]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), expected)

    def test_front_page_search(self):
        """The ?s= parameter on the front page is a search."""
        self.assertEqual(self.classifier.classify("https://example.org/?s=big+tits"),
                         Valid("/?s=big+tits", "Search: Big Tits"))
        self.assertEqual(self.classifier.classify("https://example.org/?s="), INVALID_PATH)
        self.assertEqual(self.classifier.classify("https://example.org/"), INVALID_PATH)

    def test_route_prefixes(self):
        """Each route contributes its own label prefix."""
        self.assertEqual(self.classifier.classify("https://example.org/maker/s1-no1"),
                         Valid("/maker/s1-no1", "Studio: S1 No1"))
        self.assertEqual(self.classifier.classify("https://example.org/most-watched-rank/"),
                         Valid("/most-watched-rank", "Most Watched Rank"))


class TestListingSite(unittest.TestCase):
    """Query-parameter site."""

    def setUp(self):
        self.classifier = classifier_for("example_listing.yaml")

    def test_filter_parameter_kept_behind_fixed_sort(self):
        """Only the filter survives, after the fixed sort parameter."""
        self.assertEqual(
            self.classifier.classify("https://example.net/videos.php?s=bm&ct=big-boobs&page=3"),
            Valid("/videos.php?s=l&ct=big-boobs", "Category: Big Boobs")
        )

    def test_empty_token_is_valid(self):
        """An empty captured value still classifies, with a prefix-only label."""
        self.assertEqual(self.classifier.classify("https://example.net/videos.php?ct="),
                         Valid("/videos.php?s=l&ct=", "Category: "))

    def test_first_matching_route_wins(self):
        """Route order decides when several filters are present."""
        result = self.classifier.classify("https://example.net/videos.php?ps=jane-doe&ct=retro")
        self.assertEqual(result, Valid("/videos.php?s=l&ct=retro", "Category: Retro"))

    def test_search(self):
        """Search values are re-encoded form-style."""
        self.assertEqual(self.classifier.classify("https://example.net/videos.php?q=red%20car"),
                         Valid("/videos.php?q=red+car", "Search: Red Car"))

    def test_missing_query_key(self):
        """The listing endpoint alone matches no route."""
        self.assertEqual(self.classifier.classify("https://example.net/videos.php"), INVALID_PATH)


class TestMirrorSite(unittest.TestCase):
    """Prefixed paths and non-ASCII names."""

    def setUp(self):
        self.classifier = classifier_for("example_mirror.yaml")

    def test_embedded_placeholder(self):
        """Placeholders may sit inside a segment."""
        self.assertEqual(self.classifier.classify("https://example.tv/dm127/en/genres/Creampie"),
                         Valid("/dm127/en/genres/Creampie", "Genre: Creampie"))

    def test_non_ascii_names(self):
        """Raw and percent-encoded forms give the same entry."""
        encoded = "%E6%B3%A2%E5%A4%9A%E9%87%8E%E7%B5%90%E8%A1%A3"
        expected = Valid(f"/dm248/en/actresses/{encoded}", "波多野結衣")
        for url in [f"https://example.tv/dm248/en/actresses/{encoded}",
                    f"https://example.tv/dm248/en/actresses/{encoded.lower()}",
                    "https://example.tv/dm248/en/actresses/波多野結衣"]:
            with self.subTest(url=url):
                self.assertEqual(self.classifier.classify(url), expected)

    def test_mixed_case_label(self):
        """Mixed-case tokens keep their spelling."""
        self.assertEqual(self.classifier.classify("https://example.tv/en/tags/iPhone-Cases"),
                         Valid("/en/tags/iPhone-Cases", "Tag: iPhone Cases"))


class TestInlineSite(unittest.TestCase):
    """Sites built from dictionaries."""

    def test_derived_label_without_template(self):
        """Routes without a label use the last placeholder or segment."""
        site = SiteConfig.from_dict({
            'name': 'inline',
            'domain': 'inline.test',
            'routes': [
                {'name': 'home', 'path': '/'},
                {'name': 'latest', 'path': '/latest-updates'},
                {'name': 'studio', 'path': '/studios/{studio}'},
            ]
        })
        classifier = UrlClassifier(site)
        self.assertEqual(classifier.classify("https://inline.test/"), Valid("/", "Home"))
        self.assertEqual(classifier.classify("https://inline.test/latest-updates"),
                         Valid("/latest-updates/", "Latest Updates"))
        self.assertEqual(classifier.classify("https://inline.test/studios/blue_sky"),
                         Valid("/studios/blue_sky/", "Blue Sky"))


if __name__ == '__main__':
    unittest.main()
