"""Who the app is acting for."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserContext:
    """The active user, handed from the shell to every view.

    Today it is built once at startup from configuration. A real login flow
    would construct it from a session instead; views only ever see this
    object, never a global.
    """

    user_id: str | None = None

    @property
    def logged_in(self) -> bool:
        return bool(self.user_id and self.user_id.strip())
