"""
runtime settings for key generation and hashing.

values come from RW_* environment variables when present, falling back to
the defaults below.
"""

from functools import lru_cache

import pydantic
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rwsig.errors import InvalidConfiguration
from rwsig.hashing import HashWrapper, DEFAULT_HASH


MIN_KEY_BITS = 1024
PRIME_SEARCH_ROUNDS = 1000
PRIMALITY_FALSE_POSITIVE_PROB = 1e-30


class RabinSettings(BaseSettings):
    # aliased fields read their variable name as-is, without the prefix
    model_config = SettingsConfigDict(
        env_prefix="RW_",
        env_ignore_empty=True,
        populate_by_name=True,
        frozen=True,
    )

    key_bits: int = MIN_KEY_BITS
    hash_name: str = Field(DEFAULT_HASH, validation_alias="RW_HASH")
    prime_search_rounds: int = Field(PRIME_SEARCH_ROUNDS, validation_alias="RW_PRIME_ROUNDS")
    primality_false_positive_prob: float = Field(PRIMALITY_FALSE_POSITIVE_PROB, validation_alias="RW_PRIMALITY_FP")
    log_level: str = "WARNING"

    @pydantic.field_validator("key_bits")
    @classmethod
    def check_key_bits(cls, value):
        if value < MIN_KEY_BITS:
            raise ValueError(f"key_bits must be at least {MIN_KEY_BITS}")
        return value

    @pydantic.field_validator("hash_name")
    @classmethod
    def check_hash_name(cls, value):
        HashWrapper(value)
        return value

    @pydantic.field_validator("prime_search_rounds")
    @classmethod
    def check_rounds(cls, value):
        if value < 1:
            raise ValueError("prime_search_rounds must be positive")
        return value

    @pydantic.field_validator("primality_false_positive_prob")
    @classmethod
    def check_probability(cls, value):
        if not 0 < value < 1:
            raise ValueError("primality_false_positive_prob must be in (0, 1)")
        return value

    @pydantic.field_validator("log_level")
    @classmethod
    def check_log_level(cls, value):
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return value

    def hash_fn(self) -> HashWrapper:
        return HashWrapper(self.hash_name)


def load_settings(**overrides) -> RabinSettings:
    """
    build settings from the environment, with keyword overrides on top.

    Raises:
        InvalidConfiguration: an RW_* variable or override fails validation
    """
    try:
        return RabinSettings(**overrides)
    except pydantic.ValidationError as e:
        raise InvalidConfiguration(f"invalid RW_* settings: {e}") from e


@lru_cache(maxsize=1)
def get_settings() -> RabinSettings:
    """process-wide settings, read from the environment once"""
    return load_settings()
