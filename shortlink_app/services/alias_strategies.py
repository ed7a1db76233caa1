"""
Alias generation strategies for URL shortener.
Uses Strategy Pattern to allow different generation algorithms.
"""

import random
import string
from abc import ABC, abstractmethod
from typing import Optional

from shortlink_app.exceptions import RandomSourceUnavailableError


class AliasStrategy(ABC):
    """Abstract base class for alias generation strategies"""

    @abstractmethod
    def generate(self, length: int) -> str:
        """
        Generate an alias.

        Args:
            length: Number of characters, must be positive

        Returns:
            An alias string. Not checked for uniqueness: the store's unique
            index decides whether it can be used.
        """
        pass


class RandomAliasStrategy(AliasStrategy):
    """
    Random alphanumeric aliases.
    Every character is drawn uniformly from [a-zA-Z0-9].

    Pros: Simple, unpredictable, no DB round trip
    Cons: Collisions are possible (62^8 space at the default length),
          they surface as AliasExistsError from the store
    """

    ALPHABET = string.ascii_letters + string.digits

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source; defaults to random.SystemRandom (os.urandom)
        """
        self.rng = rng or random.SystemRandom()

    def generate(self, length: int) -> str:
        """Generate a random alias of exactly ``length`` characters"""
        if length < 1:
            raise ValueError(f"Alias length must be positive (given value: {length})")

        try:
            return ''.join(self.rng.choice(self.ALPHABET) for _ in range(length))
        except (OSError, NotImplementedError) as exc:
            raise RandomSourceUnavailableError(op="services.alias.generate") from exc
