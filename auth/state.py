from __future__ import annotations

from typing import Any, Callable, List, Optional


Listener = Callable[["CurrentUserState"], None]


class CurrentUserState:
    """Observable holder for the signed-in user and a loading flag.

    Written by the auth facade only. Readers may see a stale user until the
    next auth notification arrives.
    """

    def __init__(self) -> None:
        self._user: Optional[Any] = None
        self._loading: bool = True
        self._listeners: List[Listener] = []

    @property
    def user(self) -> Optional[Any]:
        return self._user

    @property
    def loading(self) -> bool:
        return self._loading

    def set_user(self, user: Optional[Any]) -> None:
        self._user = user
        self._notify()

    def set_loading(self, loading: bool) -> None:
        self._loading = loading
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and call it once with the current state."""
        self._listeners.append(listener)
        listener(self)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
