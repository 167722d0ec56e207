from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class Handle:
    """
    Revocable reference to a payload held by a ResourceHandleManager.

    The handle itself is a plain value; whether it is still live is owned
    by the manager that issued it.
    """

    handle_id: str
    url: str
    size: int = 0
