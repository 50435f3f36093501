import secrets
from math import gcd

import pytest

from rwsig.errors import InvalidMessage, InvalidSignature, MessageTooLarge, SquareRootModPrimeFailed
from rwsig.hashing import HashWrapper
from rwsig.keys import PrivateKey
from rwsig.signing import (
    Signature,
    extract_signature,
    int_to_bytes,
    pack_signature,
    raw_sign,
    recover,
    sign,
    sign_textbook,
    verify,
    verify_textbook,
)


class TestEncoding:
    @pytest.mark.parametrize("e, f, flags", [(1, 1, 0), (-1, 1, 1), (1, 2, 2), (-1, 2, 3)])
    def test_flag_byte(self, e, f, flags):
        packed = pack_signature(e, f, 0x1234)
        assert packed == bytes([flags, 0x12, 0x34])
        assert extract_signature(packed) == (e, f, 0x1234)

    def test_large_magnitude(self, keypair):
        x = keypair.public.n - 1
        assert extract_signature(pack_signature(-1, 2, x)) == (-1, 2, x)

    def test_zero_magnitude_keeps_minimum_length(self):
        assert pack_signature(1, 1, 0) == b"\x00\x00"
        assert extract_signature(b"\x00\x00") == (1, 1, 0)

    @pytest.mark.parametrize("data", [b"", b"\x00", b"\x03"])
    def test_too_short(self, data):
        with pytest.raises(InvalidSignature):
            extract_signature(data)

    @pytest.mark.parametrize("bit", range(2, 8))
    def test_reserved_bits(self, bit):
        with pytest.raises(InvalidSignature):
            extract_signature(bytes([1 << bit, 0x42]))

    @pytest.mark.parametrize("e, f, x", [(0, 1, 5), (1, 3, 5), (1, 1, -5)])
    def test_invalid_fields(self, e, f, x):
        with pytest.raises(InvalidSignature):
            Signature(e, f, x)

    def test_int_to_bytes(self):
        assert int_to_bytes(0) == b"\x00"
        assert int_to_bytes(255) == b"\xff"
        assert int_to_bytes(256) == b"\x01\x00"


class TestSignVerify:
    def test_round_trip(self, keypair, messages):
        for message in messages:
            signature = keypair.private.sign(message)
            assert keypair.public.verify(message, signature)

    def test_random_messages(self, keypair):
        for _ in range(10):
            message = secrets.token_bytes(10 + secrets.randbelow(90))
            signature = sign(message, keypair.private)
            assert verify(message, signature, keypair.public)

    def test_signing_is_deterministic(self, keypair):
        assert keypair.private.sign(b"same") == keypair.private.sign(b"same")

    def test_wrong_message(self, keypair):
        signature = keypair.private.sign(b"Hello, World!")
        assert not keypair.public.verify(b"Hello, World?", signature)

    def test_tampered_magnitude(self, keypair):
        message = b"Hello, World!"
        signature = keypair.private.sign(message)
        for index in (1, len(signature) // 2, len(signature) - 1):
            for bit in (0, 7):
                tampered = bytearray(signature)
                tampered[index] ^= 1 << bit
                assert not keypair.public.verify(message, bytes(tampered))

    @pytest.mark.parametrize("bit", [0, 1])
    def test_tampered_flags(self, keypair, bit):
        message = b"Hello, World!"
        tampered = bytearray(keypair.private.sign(message))
        tampered[0] ^= 1 << bit
        assert not keypair.public.verify(message, bytes(tampered))

    @pytest.mark.parametrize("bit", range(2, 8))
    def test_tampered_reserved_flags(self, keypair, bit):
        message = b"Hello, World!"
        tampered = bytearray(keypair.private.sign(message))
        tampered[0] ^= 1 << bit
        with pytest.raises(InvalidSignature):
            keypair.public.verify(message, bytes(tampered))

    def test_custom_hash(self, keypair):
        private = PrivateKey(keypair.private.p, keypair.private.q, HashWrapper("sha512"))
        public = private.public_key()
        message = b"Hello, World!"
        signature = private.sign(message)
        assert public.verify(message, signature)
        # a verifier hashing with sha256 disagrees
        assert not keypair.public.verify(message, signature)


class TestRawSign:
    def test_every_unit_recovers(self, small_key):
        n = small_key.n
        seen = set()
        for value in range(1, n):
            if gcd(value, n) != 1:
                continue
            sig = Signature.from_bytes(raw_sign(value, small_key))
            assert 0 <= sig.x < n
            assert recover(sig, n) == value
            seen.add((sig.e, sig.f))
        assert seen == {(1, 1), (-1, 1), (1, 2), (-1, 2)}

    def test_value_too_large(self, keypair):
        with pytest.raises(MessageTooLarge):
            keypair.private.raw_sign(keypair.public.n)

    def test_negative_value(self, small_key):
        with pytest.raises(MessageTooLarge):
            raw_sign(-1, small_key)

    def test_hash_larger_than_modulus(self, small_key):
        with pytest.raises(MessageTooLarge):
            small_key.sign(b"a 256-bit digest does not fit in 437")

    def test_zero_is_rejected(self, small_key):
        with pytest.raises(InvalidMessage):
            raw_sign(0, small_key)

    @pytest.mark.parametrize("value", [19, 23, 19 * 22, 23 * 18])
    def test_value_sharing_a_factor_is_rejected(self, small_key, value):
        with pytest.raises(InvalidMessage):
            raw_sign(value, small_key)

    def test_large_key_value_sharing_a_factor(self, keypair):
        p = keypair.private.p
        with pytest.raises(InvalidMessage):
            keypair.private.raw_sign(p * 2)


class TestTextbook:
    def test_square_message(self, small_key):
        message = int_to_bytes(pow(5, 2, small_key.n))
        signature = sign_textbook(message, small_key)
        assert verify_textbook(message, signature, small_key.public_key())

    def test_large_key(self, keypair):
        n = keypair.public.n
        message = int_to_bytes(pow(secrets.randbelow(n - 2) + 2, 2, n))
        signature = sign_textbook(message, keypair.private)
        assert verify_textbook(message, signature, keypair.public)
        assert not verify_textbook(message + b"\x01", signature, keypair.public)

    def test_non_residue(self, small_key):
        # 2 is a non-residue modulo 19
        with pytest.raises(SquareRootModPrimeFailed):
            sign_textbook(b"\x02", small_key)

    def test_message_too_large(self, small_key):
        with pytest.raises(MessageTooLarge):
            sign_textbook(int_to_bytes(small_key.n), small_key)
