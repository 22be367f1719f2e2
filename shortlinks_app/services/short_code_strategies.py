"""
Short code generation strategies for the link store.
Uses Strategy Pattern to allow different generation algorithms.

Strategies only propose candidates. Uniqueness is the store's job: it
keeps asking for a new candidate (bumping ``attempt``) until one is free.
"""

import hashlib
import logging
import secrets
import string
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

logger = logging.getLogger(__name__)


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    def __init__(self, length: int = 8):
        if length <= 0:
            raise ValueError(f"Short code length must be positive, got {length}")
        self.length = length

    @abstractmethod
    def generate(
        self,
        target_url: str,
        owner_id: UUID,
        instant: datetime,
        attempt: int = 0
    ) -> str:
        """
        Propose a short code.

        Args:
            target_url: URL being shortened
            owner_id: Owner of the new link
            instant: Creation instant (primary collision breaker)
            attempt: Retry number, 0 on the first call

        Returns:
            A candidate code (not guaranteed to be unique)
        """
        pass


class DigestShortCodeStrategy(ShortCodeStrategy):
    """
    Hash-based strategy.
    Hex digest of url + owner + creation millis, truncated to ``length``.

    Pros: Deterministic for identical inputs, no shared state
    Cons: Collisions possible once truncated, needs the store to retry
    """

    def __init__(self, length: int = 8, algorithm: str = "md5"):
        super().__init__(length)
        self.algorithm = algorithm

    def generate(
        self,
        target_url: str,
        owner_id: UUID,
        instant: datetime,
        attempt: int = 0
    ) -> str:
        """Generate a code from the digest, falling back to a random UUID"""
        millis = int(instant.timestamp() * 1000)
        payload = f"{target_url}{owner_id}{millis}"
        if attempt:
            payload += f"#{attempt}"

        try:
            digest = hashlib.new(self.algorithm, payload.encode("utf-8")).hexdigest()
        except ValueError as e:
            # Algorithm missing from this build (e.g. md5 under FIPS)
            logger.warning("Digest %r unavailable (%s), using random code", self.algorithm, e)
            return self._fallback()

        return digest[:min(self.length, len(digest))]

    def _fallback(self) -> str:
        """Random hex identifier truncated to the configured length"""
        hex_id = uuid.uuid4().hex
        return hex_id[:min(self.length, len(hex_id))]


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Random generation strategy.
    Ignores its inputs and picks ``length`` random alphanumerics.

    Pros: Simple, unpredictable
    Cons: Not reproducible, collision retries are pure luck
    """

    def __init__(self, length: int = 8):
        super().__init__(length)
        self.characters = string.ascii_letters + string.digits

    def generate(
        self,
        target_url: str,
        owner_id: UUID,
        instant: datetime,
        attempt: int = 0
    ) -> str:
        """Generate random short code"""
        return ''.join(secrets.choice(self.characters) for _ in range(self.length))
