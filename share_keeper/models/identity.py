"""User identity model"""
from dataclasses import dataclass


@dataclass
class UserIdentity:
    """Name and email used to sign commits and name the key pair."""
    name: str = ""
    email: str = ""

    @property
    def is_set(self) -> bool:
        return bool(self.name or self.email)
