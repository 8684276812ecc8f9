"""
Password hashing module (bcrypt).
"""

import bcrypt

from common.constants import DEFAULT_BCRYPT_ROUNDS


class PasswordHasher:
    """Computes and checks bcrypt digests."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Return a salted digest of ``password``."""
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=self.rounds)).decode('utf-8')

    def verify(self, password: str, digest: str) -> bool:
        """Check ``password`` against a stored digest. Raises ValueError on a malformed digest."""
        return bcrypt.checkpw(password.encode('utf-8'), digest.encode('utf-8'))
