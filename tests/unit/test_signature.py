import pytest

from storefront.payments.signature import (
    compute_signature,
    parse_signature_header,
    timing_safe_equal,
    verify_signature,
)

SECRET = "whsec_unit"
BODY = '{"id":"evt_1","type":"checkout.session.completed"}'
TS = "1700000000"


def _header(body=BODY, ts=TS, secret=SECRET):
    return f"t={ts},v1={compute_signature(body, secret, ts)}"


def test_valid_signature():
    assert verify_signature(BODY, _header(), SECRET) is True


def test_bytes_body_is_accepted():
    assert verify_signature(BODY.encode("utf-8"), _header(), SECRET) is True


def test_altered_body_is_rejected():
    tampered = BODY.replace("evt_1", "evt_2")
    assert verify_signature(tampered, _header(), SECRET) is False


def test_altered_timestamp_is_rejected():
    header = _header().replace(f"t={TS}", "t=1700000001")
    assert verify_signature(BODY, header, SECRET) is False


def test_altered_digest_is_rejected():
    digest = compute_signature(BODY, SECRET, TS)
    flipped = ("0" if digest[-1] != "0" else "1")
    header = f"t={TS},v1={digest[:-1]}{flipped}"
    assert verify_signature(BODY, header, SECRET) is False


def test_wrong_secret_is_rejected():
    assert verify_signature(BODY, _header(secret="other"), SECRET) is False


@pytest.mark.parametrize("header", [None, "", "v1=abc", f"t={TS}", f"t={TS},v0=abc", "garbage"])
def test_incomplete_headers_are_rejected(header):
    assert verify_signature(BODY, header, SECRET) is False


def test_any_matching_candidate_is_accepted():
    digest = compute_signature(BODY, SECRET, TS)
    header = f"t={TS},v1={'0' * 64},v1={digest},v1=deadbeef"
    assert verify_signature(BODY, header, SECRET) is True


def test_empty_secret_is_rejected():
    assert verify_signature(BODY, _header(secret=""), "") is False


def test_tolerance_window():
    header = _header()
    assert verify_signature(BODY, header, SECRET, tolerance=300, now=int(TS) + 100) is True
    assert verify_signature(BODY, header, SECRET, tolerance=300, now=int(TS) + 301) is False
    # désactivé par défaut
    assert verify_signature(BODY, header, SECRET, now=int(TS) + 10_000) is True


def test_parse_signature_header():
    assert parse_signature_header(" t=1 , v1=aa,v1=bb, v0=cc, =x, k=") == ("1", ["aa", "bb"])
    assert parse_signature_header(None) == (None, [])


def test_timing_safe_equal():
    assert timing_safe_equal("abc", "abc") is True
    assert timing_safe_equal("abc", "abd") is False
    assert timing_safe_equal("abc", "abcd") is False
    assert timing_safe_equal("", "") is True
