from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Caller identity handed to every service operation.

    Issued by the identity provider and trusted as-is. `email` is the key used
    to match fight invitations.
    """
    id: str
    email: str
    username: str | None = None

    @property
    def display_name(self) -> str:
        return self.username or self.email


def normalize_email(value: str | None) -> str:
    return (value or '').strip().lower()
