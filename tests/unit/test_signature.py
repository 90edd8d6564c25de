"""Tests for miniflux_summary.core.signature module."""

from miniflux_summary.core.signature import compute_signature, verify_signature

BODY = b'{"event_type":"new_entries","entries":[]}'


class TestComputeSignature:
    def test_known_hmac_sha256_vector(self) -> None:
        assert compute_signature("key", b"The quick brown fox jumps over the lazy dog") == (
            "f7bc83f430538424b13298e6aa6fb143ef4d59a14946175997479dbc2d1a3cd8"
        )

    def test_is_lowercase_hex(self) -> None:
        signature = compute_signature("secret", BODY)
        assert len(signature) == 64
        assert signature == signature.lower()


class TestVerifySignature:
    def test_accepts_matching_signature(self) -> None:
        assert verify_signature("secret", BODY, compute_signature("secret", BODY)) is True

    def test_rejects_tampered_body(self) -> None:
        signature = compute_signature("secret", BODY)
        assert verify_signature("secret", BODY + b" ", signature) is False

    def test_rejects_identical_body_signed_with_other_secret(self) -> None:
        signature = compute_signature("another-secret", BODY)
        assert verify_signature("secret", BODY, signature) is False

    def test_rejects_missing_signature(self) -> None:
        assert verify_signature("secret", BODY, None) is False
        assert verify_signature("secret", BODY, "") is False

    def test_rejects_when_secret_is_empty(self) -> None:
        assert verify_signature("", BODY, compute_signature("", BODY)) is False

    def test_comparison_is_exact(self) -> None:
        signature = compute_signature("secret", BODY)
        assert verify_signature("secret", BODY, signature.upper()) is False
        assert verify_signature("secret", BODY, signature + "0") is False

    def test_rejects_non_ascii_signature(self) -> None:
        assert verify_signature("secret", BODY, "é" * 64) is False
