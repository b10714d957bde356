"""Tests for linkverify/core/engine.py - dispatch and parallel verification."""

import threading
from collections import Counter

import httpx
import pytest
import respx

from linkverify.core.cache import MemoryCache, NullCache
from linkverify.core.engine import verify, verify_one
from linkverify.core.exceptions import InvalidLink
from linkverify.core.models import Link, Location, Outcome, ValidationResult
from linkverify.verifiers import FileVerifier, WebVerifier

VALID = ValidationResult.VALID
IGNORED = ValidationResult.IGNORED
UNSUPPORTED = ValidationResult.UNSUPPORTED


def _all_entries(outcome):
    """Every (location, link) pair in an outcome, with multiplicity."""
    entries = Counter()
    for bucket in (outcome.valid, outcome.ignored, outcome.unsupported, outcome.broken):
        for item in bucket:
            entries[(item.location, item.link)] += 1
    return entries


class TestVerifyOne:
    """Test the per-link dispatcher."""

    pytestmark = pytest.mark.unit

    def test_cache_hit_skips_verifiers(self, make_verifier, call_log, dict_cache):
        link = Link("https://example.com/cached")
        cache = dict_cache({link.href: True})
        verifiers = [make_verifier("a", VALID), make_verifier("b", IGNORED)]

        assert verify_one(link, verifiers, cache) is VALID
        assert call_log == []
        assert cache.lookups == [link.href]

    @pytest.mark.parametrize("cached", [False, None])
    def test_cache_miss_or_negative_falls_through(self, make_verifier, call_log, dict_cache, cached):
        link = Link("https://example.com/x")
        cache = dict_cache({link.href: cached})

        assert verify_one(link, [make_verifier("a", IGNORED)], cache) is IGNORED
        assert call_log == [("a", link.href)]

    def test_fallback_order(self, make_verifier, call_log):
        link = Link("https://example.com/x")
        verifiers = [make_verifier("a", UNSUPPORTED), make_verifier("b", VALID)]

        assert verify_one(link, verifiers, NullCache()) is VALID
        assert call_log == [("a", link.href), ("b", link.href)]

    @pytest.mark.parametrize("decisive", [VALID, IGNORED])
    def test_first_decisive_answer_wins(self, make_verifier, call_log, decisive):
        link = Link("https://example.com/x")
        verifiers = [make_verifier("a", decisive), make_verifier("b", VALID)]

        assert verify_one(link, verifiers, NullCache()) is decisive
        assert call_log == [("a", link.href)]

    def test_exhaustion(self, make_verifier, call_log):
        link = Link("gopher://example.com")
        verifiers = [make_verifier("a"), make_verifier("b"), make_verifier("c")]

        assert verify_one(link, verifiers, NullCache()) is UNSUPPORTED
        assert [name for name, _ in call_log] == ["a", "b", "c"]

    def test_empty_chain_is_unsupported(self):
        assert verify_one(Link("./a.md"), [], NullCache()) is UNSUPPORTED

    def test_invalid_link_stops_the_chain(self, make_verifier, call_log):
        link = Link("./missing.md")
        verifiers = [make_verifier("a", InvalidLink("missing")), make_verifier("b", VALID)]

        with pytest.raises(InvalidLink):
            verify_one(link, verifiers, NullCache())
        assert call_log == [("a", link.href)]

    def test_failing_cache_is_treated_as_unknown(self, make_verifier):
        class BrokenCache:
            def is_valid(self, key):
                raise OSError("cache unavailable")

        assert verify_one(Link("x"), [make_verifier("a", IGNORED)], BrokenCache()) is IGNORED

    def test_plain_function_verifier(self):
        calls = []

        def only_mailto(link, cache):
            calls.append(link.href)
            return IGNORED if link.scheme == "mailto" else UNSUPPORTED

        assert verify_one(Link("mailto:a@example.com"), [only_mailto], NullCache()) is IGNORED
        assert verify_one(Link("./a.md"), [only_mailto], NullCache()) is UNSUPPORTED
        assert calls == ["mailto:a@example.com", "./a.md"]

    def test_non_result_return_is_rejected(self, make_verifier):
        with pytest.raises(TypeError, match="expected a ValidationResult"):
            verify_one(Link("x"), [make_verifier("a", True)], NullCache())


class TestVerify:
    """Test the parallel orchestrator."""

    pytestmark = pytest.mark.unit

    def test_empty_input(self, make_verifier):
        outcome = verify([], [make_verifier("a", VALID)])
        assert outcome == Outcome()
        assert outcome.total == 0

    @pytest.mark.parametrize("workers", [1, 2, 8, 32])
    def test_every_pair_exactly_once(self, make_verifier, make_pairs, workers):
        pairs = make_pairs(200)
        # Duplicate pairs are distinct submissions and must be kept
        pairs += pairs[:10]

        def classify(link):
            n = int(link.href.rsplit("/", 1)[1])
            if n % 5 == 0:
                raise InvalidLink("HTTP 404")
            return [VALID, IGNORED, UNSUPPORTED][n % 3]

        outcome = verify(pairs, [make_verifier("a", classify)], workers=workers)

        assert outcome.total == len(pairs)
        assert _all_entries(outcome) == Counter(pairs)

    def test_result_independent_of_worker_count(self, make_verifier, make_pairs):
        pairs = make_pairs(150)

        def classify(link):
            return VALID if link.href.endswith(("1", "3", "5")) else IGNORED

        single = verify(pairs, [make_verifier("a", classify)], workers=1)
        many = verify(pairs, [make_verifier("a", classify)], workers=16)

        assert single == many
        assert single.valid == many.valid
        assert single.ignored == many.ignored

    def test_routes_each_link_to_its_verifier(self, make_verifier, make_pairs):
        def only(prefix, result):
            return lambda link, cache: result if link.href.startswith(prefix) else UNSUPPORTED

        pairs = [
            (Location("a.md", 1), Link("https://example.com/")),
            (Location("a.md", 2), Link("./b.md")),
            (Location("a.md", 3), Link("ftp://example.com/")),
        ]
        outcome = verify(pairs, [only("./", VALID), only("https:", IGNORED)], workers=3)

        assert [c.link.href for c in outcome.valid] == ["./b.md"]
        assert [c.link.href for c in outcome.ignored] == ["https://example.com/"]
        assert [c.link.href for c in outcome.unsupported] == ["ftp://example.com/"]

    def test_accepts_lazy_generator(self, make_verifier, make_pairs):
        produced = []

        def generate():
            for pair in make_pairs(50):
                produced.append(pair)
                yield pair

        outcome = verify(generate(), [make_verifier("a", VALID)], workers=4)
        assert len(produced) == 50
        assert len(outcome.valid) == 50

    def test_verifier_crash_is_isolated(self, make_verifier, make_pairs):
        def classify(link):
            if link.href.endswith("/3"):
                raise ValueError("boom")
            return VALID

        outcome = verify(make_pairs(10), [make_verifier("a", classify)], workers=4)

        assert len(outcome.valid) == 9
        assert len(outcome.broken) == 1
        assert outcome.broken[0].link.href.endswith("/3")
        assert outcome.broken[0].reason == "ValueError: boom"

    def test_unprintable_error_does_not_stall_single_worker(self, make_verifier, make_pairs):
        class Unprintable(Exception):
            def __str__(self):
                raise RuntimeError("no message")

        # More pairs than the queue holds for one worker
        outcome = verify(make_pairs(20), [make_verifier("a", Unprintable())], workers=1)

        assert len(outcome.broken) == 20
        assert {b.reason for b in outcome.broken} == {"Unprintable"}

    def test_worker_system_exit_stops_run(self, make_verifier, make_pairs):
        calls = []

        def classify(link):
            calls.append(link.href)
            raise SystemExit(3)

        with pytest.raises(SystemExit):
            verify(make_pairs(40), [make_verifier("a", classify)], workers=1)
        assert len(calls) == 1

    def test_invalid_link_reason_is_recorded(self, make_verifier):
        pairs = [(Location("a.md", 1), Link("./gone.md"))]
        outcome = verify(pairs, [make_verifier("a", InvalidLink("gone.md does not exist"))])

        assert outcome.broken[0].reason == "gone.md does not exist"
        assert not outcome.passed()

    def test_input_error_propagates(self, make_verifier, make_pairs):
        def generate():
            yield from make_pairs(3)
            raise RuntimeError("scanner failed")

        with pytest.raises(RuntimeError, match="scanner failed"):
            verify(generate(), [make_verifier("a", VALID)], workers=2)

    def test_rejects_zero_workers(self, make_verifier):
        with pytest.raises(ValueError):
            verify([], [make_verifier("a", VALID)], workers=0)

    def test_cache_hits_skip_verification(self, make_verifier, call_log, make_pairs):
        pairs = make_pairs(10)
        cache = MemoryCache()
        for _, link in pairs[:4]:
            cache.record(link.href, True)

        outcome = verify(pairs, [make_verifier("a", IGNORED)], cache, workers=3)

        assert len(outcome.valid) == 4
        assert len(outcome.ignored) == 6
        assert len(call_log) == 6

    def test_slow_link_does_not_block_others(self):
        """A blocked worker must not stop the remaining links from being checked."""
        released = threading.Event()

        def gate(link, cache):
            if link.href == "slow":
                return VALID if released.wait(timeout=10) else IGNORED
            released.set()
            return VALID

        pairs = [(Location("a.md", 1), Link("slow")), (Location("a.md", 2), Link("fast"))]
        outcome = verify(pairs, [gate], workers=2)

        assert len(outcome.valid) == 2


class TestFileAndWebScenario:
    """A file link and a web link checked together."""

    pytestmark = pytest.mark.integration

    @respx.mock
    def test_no_cross_contamination(self, tmp_path):
        (tmp_path / "a.md").write_text("# A")
        respx.head("https://example.com/").respond(200)

        pairs = [
            (Location("index.md", 1), Link("file:./a.md", base=tmp_path)),
            (Location("index.md", 2), Link("https://example.com/")),
        ]
        with httpx.Client() as client:
            verifiers = [FileVerifier(tmp_path), WebVerifier(client=client)]
            cache = MemoryCache()
            outcome = verify(pairs, verifiers, cache, workers=2)

        assert [c.location.line for c in outcome.valid] == [1, 2]
        assert outcome.valid[0].link.href == "file:./a.md"
        assert outcome.valid[1].link.href == "https://example.com/"
        assert outcome.broken == ()
        # Only the web verifier writes to the cache
        assert cache.is_valid("https://example.com/") is True
        assert cache.is_valid("file:./a.md") is None

    @respx.mock
    def test_broken_web_link_beside_missing_file(self, tmp_path):
        respx.head("https://example.com/gone").respond(404)
        respx.get("https://example.com/gone").respond(404)

        pairs = [
            (Location("index.md", 1), Link("./missing.md", base=tmp_path)),
            (Location("index.md", 2), Link("https://example.com/gone")),
        ]
        with httpx.Client() as client:
            outcome = verify(pairs, [FileVerifier(tmp_path), WebVerifier(client=client)])

        reasons = {b.link.href: b.reason for b in outcome.broken}
        assert reasons == {
            "./missing.md": "./missing.md does not exist",
            "https://example.com/gone": "HTTP 404",
        }
