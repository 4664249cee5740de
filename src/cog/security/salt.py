"""
Salt generation.

Salts are strings over the crypt alphabet ``[./0-9A-Za-z]``. Sources are
tried in order of preference: the system random device, OpenSSL, then
Python's ``secrets`` module.
"""

from __future__ import annotations

import logging
import secrets
import ssl
from pathlib import Path

from cog.errors import SaltGenerationError

logger = logging.getLogger(__name__)

ALPHABET = "./0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def _encode(data: bytes, length: int) -> str:
    # 256 is a multiple of 64, so every character is equally likely
    return "".join(ALPHABET[byte % 64] for byte in data[:length])


class Salt:
    """Generates random salt strings."""

    DEFAULT_LENGTH = 32
    RANDOM_DEVICE = "/dev/urandom"

    def generate(self, length: int = DEFAULT_LENGTH) -> str:
        """
        Generate a salt using the first source that works.

        Raises:
            SaltGenerationError: If every source failed
        """
        sources = (self.generate_from_unix_random, self.generate_from_openssl, self.generate_natively)
        for source in sources:
            try:
                salt = source(length)
            except (OSError, RuntimeError) as e:
                logger.debug("Salt source %s failed: %s", source.__name__, e)
                continue
            if len(salt) == length:
                return salt
        raise SaltGenerationError("Salt string could not be generated.")

    def generate_from_unix_random(self, length: int = DEFAULT_LENGTH, path: str | Path | None = None) -> str:
        """
        Raises:
            RuntimeError: If the random device cannot be read or returns nothing
        """
        device = Path(path or self.RANDOM_DEVICE)
        try:
            with device.open("rb") as f:
                data = f.read(length)
        except OSError as e:
            raise RuntimeError(f"Unable to read `{device}`: {e}") from e
        if length and not data:
            raise RuntimeError(f"`{device}` returned an empty value")
        return _encode(data, length)

    def generate_from_openssl(self, length: int = DEFAULT_LENGTH) -> str:
        return _encode(ssl.RAND_bytes(length), length)

    def generate_natively(self, length: int = DEFAULT_LENGTH) -> str:
        return "".join(secrets.choice(ALPHABET) for _ in range(length))
