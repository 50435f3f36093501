"""
Shared fixtures for the Rabin-Williams tests.
"""

import pytest

from rwsig.config import get_settings
from rwsig.keys import KeyPair, PrivateKey


# 19 == 3 (mod 8), 23 == 7 (mod 8)
SMALL_P = 19
SMALL_Q = 23


@pytest.fixture(scope="session")
def keypair():
    """one 1024-bit key pair shared by the whole run; generation is slow"""
    return KeyPair.generate(1024)


@pytest.fixture
def small_key():
    return PrivateKey(p=SMALL_P, q=SMALL_Q)


@pytest.fixture
def messages():
    return [
        b"",
        b"Hello, World!",
        b"\x00" * 32,
        bytes(range(256)),
        "blind signatures hide the message".encode("utf-8"),
    ]


@pytest.fixture
def rw_env(monkeypatch):
    """set RW_* variables for one test; the cached settings are rebuilt around it"""
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
