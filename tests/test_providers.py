"""Provider tests with a mocked urllib transport.

Tests payload parsing, failure degradation to None, the fixed tier order
and the CSPRNG terminal tier.
"""

import http.client
import json
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from truedraw.config import ProvidersConfig
from truedraw.core.models import Provenance
from truedraw.core.providers import (
    PROVIDER_ORDER,
    acquire_entropy,
    build_provider_chain,
    get_provider,
)
from truedraw.core.providers.atmospheric import AtmosphericProvider
from truedraw.core.providers.csprng import CSPRNGProvider
from truedraw.core.providers.quantum import QuantumProvider


# =============================================================================
# Mock response factories
# =============================================================================


def _mock_response(body: bytes, status: int = 200):
    resp = MagicMock()
    resp.status = status
    resp.read.return_value = body
    urlopen = MagicMock()
    urlopen.return_value.__enter__.return_value = resp
    return urlopen


def _truncated_response(partial: bytes):
    resp = MagicMock()
    resp.status = 200
    resp.read.side_effect = http.client.IncompleteRead(partial)
    urlopen = MagicMock()
    urlopen.return_value.__enter__.return_value = resp
    return urlopen


def _quantum_body(data, success=True) -> bytes:
    return json.dumps({"type": "uint16", "length": len(data), "data": data, "success": success}).encode()


def _requested_url(urlopen: MagicMock) -> str:
    return urlopen.call_args[0][0].full_url


# =============================================================================
# Quantum
# =============================================================================


class TestQuantumProvider:
    def test_success(self):
        urlopen = _mock_response(_quantum_body([1, 2, 65535]))
        with patch("urllib.request.urlopen", urlopen):
            values = QuantumProvider().fetch(3)

        assert values == [1, 2, 65535]
        url = _requested_url(urlopen)
        assert url.startswith("https://qrng.anu.edu.au/API/jsonI.php?")
        assert "length=3" in url
        assert "type=uint16" in url
        assert urlopen.call_args.kwargs["timeout"] == 5.0

    def test_sends_user_agent(self):
        urlopen = _mock_response(_quantum_body([7]))
        with patch("urllib.request.urlopen", urlopen):
            QuantumProvider().fetch(1)
        request = urlopen.call_args[0][0]
        assert request.get_header("User-agent") == "truedraw"

    def test_false_success_flag(self):
        urlopen = _mock_response(_quantum_body([1, 2, 3], success=False))
        with patch("urllib.request.urlopen", urlopen):
            assert QuantumProvider().fetch(3) is None

    def test_empty_data(self):
        urlopen = _mock_response(_quantum_body([]))
        with patch("urllib.request.urlopen", urlopen):
            assert QuantumProvider().fetch(3) is None

    def test_short_batch(self):
        urlopen = _mock_response(_quantum_body([1, 2]))
        with patch("urllib.request.urlopen", urlopen):
            assert QuantumProvider().fetch(3) is None

    def test_value_out_of_range(self):
        urlopen = _mock_response(_quantum_body([1, 70000]))
        with patch("urllib.request.urlopen", urlopen):
            assert QuantumProvider().fetch(2) is None

    def test_malformed_json(self):
        urlopen = _mock_response(b"<html>maintenance</html>")
        with patch("urllib.request.urlopen", urlopen):
            assert QuantumProvider().fetch(2) is None

    def test_http_error(self):
        error = urllib.error.HTTPError(
            "https://qrng.anu.edu.au/API/jsonI.php", 503, "Service Unavailable", None, None
        )
        with patch("urllib.request.urlopen", side_effect=error):
            assert QuantumProvider().fetch(2) is None

    def test_timeout(self):
        with patch("urllib.request.urlopen", side_effect=TimeoutError("timed out")):
            assert QuantumProvider().fetch(2) is None

    def test_truncated_body(self):
        with patch("urllib.request.urlopen", _truncated_response(b'{"succ')):
            assert QuantumProvider().fetch(10) is None

    def test_server_hangs_up(self):
        error = http.client.RemoteDisconnected("Remote end closed connection")
        with patch("urllib.request.urlopen", side_effect=error):
            assert QuantumProvider().fetch(10) is None

    def test_request_above_batch_cap_fails_without_network(self):
        urlopen = _mock_response(_quantum_body([1]))
        with patch("urllib.request.urlopen", urlopen):
            assert QuantumProvider(max_batch=1024).fetch(1025) is None
        urlopen.assert_not_called()

    def test_zero_count_skips_network(self):
        urlopen = _mock_response(_quantum_body([1]))
        with patch("urllib.request.urlopen", urlopen):
            assert QuantumProvider().fetch(0) == []
        urlopen.assert_not_called()


# =============================================================================
# Atmospheric
# =============================================================================


class TestAtmosphericProvider:
    def test_success(self):
        urlopen = _mock_response(b"12\n0\n65535\n")
        with patch("urllib.request.urlopen", urlopen):
            values = AtmosphericProvider().fetch(3)

        assert values == [12, 0, 65535]
        url = _requested_url(urlopen)
        assert url.startswith("https://www.random.org/integers/?")
        for param in ("num=3", "min=0", "max=65535", "col=1", "base=10", "format=plain", "rnd=new"):
            assert param in url
        assert urlopen.call_args.kwargs["timeout"] == 10.0

    def test_non_numeric_line(self):
        urlopen = _mock_response(b"12\nError: quota exceeded\n")
        with patch("urllib.request.urlopen", urlopen):
            assert AtmosphericProvider().fetch(2) is None

    def test_short_batch(self):
        urlopen = _mock_response(b"1\n2\n")
        with patch("urllib.request.urlopen", urlopen):
            assert AtmosphericProvider().fetch(3) is None

    def test_http_error(self):
        error = urllib.error.HTTPError(
            "https://www.random.org/integers/", 503, "Service Unavailable", None, None
        )
        with patch("urllib.request.urlopen", side_effect=error):
            assert AtmosphericProvider().fetch(2) is None

    def test_truncated_body(self):
        with patch("urllib.request.urlopen", _truncated_response(b"12\n3")):
            assert AtmosphericProvider().fetch(5) is None

    def test_bad_status_line(self):
        error = http.client.BadStatusLine("garbage")
        with patch("urllib.request.urlopen", side_effect=error):
            assert AtmosphericProvider().fetch(5) is None

    def test_connection_refused(self):
        with patch(
            "urllib.request.urlopen",
            side_effect=urllib.error.URLError("connection refused"),
        ):
            assert AtmosphericProvider().fetch(2) is None


# =============================================================================
# CSPRNG
# =============================================================================


class TestCSPRNGProvider:
    def test_exact_count_of_16_bit_values(self):
        values = CSPRNGProvider().fetch(500)
        assert len(values) == 500
        assert all(0 <= v <= 0xFFFF for v in values)

    def test_cannot_fail(self):
        assert CSPRNGProvider.fallible is False
        assert CSPRNGProvider().provenance == Provenance.CSPRNG


# =============================================================================
# Registry and chain
# =============================================================================


class TestRegistry:
    def test_order(self):
        assert PROVIDER_ORDER == ("quantum", "atmospheric", "csprng")
        chain = build_provider_chain()
        assert [p.name for p in chain] == ["quantum", "atmospheric", "csprng"]
        assert [p.provenance for p in chain] == [
            Provenance.QUANTUM,
            Provenance.ATMOSPHERIC,
            Provenance.CSPRNG,
        ]

    def test_config_applied(self):
        cfg = ProvidersConfig(
            quantum_url="http://q.test/api",
            quantum_timeout=1.5,
            quantum_max_batch=64,
            atmospheric_url="http://a.test/int",
            atmospheric_timeout=2.5,
        )
        quantum = get_provider("quantum", cfg)
        atmospheric = get_provider("atmospheric", cfg)
        assert (quantum.url, quantum.timeout, quantum.max_batch) == ("http://q.test/api", 1.5, 64)
        assert (atmospheric.url, atmospheric.timeout) == ("http://a.test/int", 2.5)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown entropy provider"):
            get_provider("lava-lamp")


class TestAcquireEntropy:
    def test_first_tier_wins(self, make_provider):
        quantum = make_provider(Provenance.QUANTUM)
        atmospheric = make_provider(Provenance.ATMOSPHERIC)

        values, provenance = acquire_entropy(5, [quantum, atmospheric])

        assert values == [0, 1, 2, 3, 4]
        assert provenance == Provenance.QUANTUM
        assert atmospheric.calls == []

    def test_falls_through_in_order(self, make_provider):
        quantum = make_provider(Provenance.QUANTUM, fail=True)
        atmospheric = make_provider(Provenance.ATMOSPHERIC, start=100)

        values, provenance = acquire_entropy(3, [quantum, atmospheric])

        assert values == [100, 101, 102]
        assert provenance == Provenance.ATMOSPHERIC
        assert quantum.calls == [3]

    def test_all_external_tiers_fail(self, failing_chain):
        values, provenance = acquire_entropy(50, failing_chain)
        assert len(values) == 50
        assert provenance == Provenance.CSPRNG

    def test_empty_chain_still_yields_csprng(self):
        values, provenance = acquire_entropy(10, [])
        assert len(values) == 10
        assert provenance == Provenance.CSPRNG

    def test_quantum_request_capped_at_batch_limit(self):
        quantum = QuantumProvider(max_batch=1024)
        urlopen = _mock_response(_quantum_body(list(range(1024))))
        with patch("urllib.request.urlopen", urlopen):
            values, provenance = acquire_entropy(2000, [quantum])

        assert provenance == Provenance.QUANTUM
        assert len(values) == 1024
        assert "length=1024" in _requested_url(urlopen)

    def test_atmospheric_used_when_quantum_http_fails(self):
        chain = [QuantumProvider(), AtmosphericProvider(), CSPRNGProvider()]

        def fake_urlopen(request, timeout):
            if "qrng" in request.full_url:
                raise urllib.error.HTTPError(request.full_url, 500, "err", None, None)
            resp = MagicMock()
            resp.status = 200
            resp.read.return_value = b"5\n6\n7\n"
            ctx = MagicMock()
            ctx.__enter__.return_value = resp
            return ctx

        with patch("urllib.request.urlopen", side_effect=fake_urlopen):
            values, provenance = acquire_entropy(3, chain)

        assert values == [5, 6, 7]
        assert provenance == Provenance.ATMOSPHERIC

    def test_broken_responses_fall_through_to_csprng(self):
        chain = [QuantumProvider(), AtmosphericProvider(), CSPRNGProvider()]
        with patch("urllib.request.urlopen", _truncated_response(b"partial")):
            values, provenance = acquire_entropy(8, chain)

        assert len(values) == 8
        assert provenance == Provenance.CSPRNG
