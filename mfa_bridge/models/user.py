"""User model for the homegrown identity store."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class User:
    """A principal allowed to authenticate with the first factor."""

    id: str
    username: str  # display handle
    email: str  # contact address, used as the MFA login hint
    password: str = field(repr=False)  # secret-check material

    def public_dict(self) -> dict:
        """User fields safe to return to clients."""
        return {"id": self.id, "username": self.username, "email": self.email}
