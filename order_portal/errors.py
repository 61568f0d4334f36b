"""Exception hierarchy shared by the storage, workflow, auth and AI layers."""


class OrderPortalError(Exception):
    """Base class for every error raised by the order portal."""


class StorageError(OrderPortalError):
    """Reading or writing the order collection failed (disk, network or payload)."""


class OrderValidationError(OrderPortalError):
    """The order form or an action payload is incomplete or inconsistent."""


class OrderNotFoundError(OrderPortalError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class InvalidTransitionError(OrderPortalError):
    """The requested action is not valid from the order's current status."""

    def __init__(self, action: str, status: str) -> None:
        super().__init__(f"Action '{action}' is not allowed while the order is '{status}'")
        self.action = action
        self.status = status


class ActionNotAllowedError(OrderPortalError):
    """The signed-in role may not perform the requested action."""

    def __init__(self, action: str, role: str) -> None:
        super().__init__(f"Role '{role}' may not perform '{action}'")
        self.action = action
        self.role = role


class InvalidCredentialsError(OrderPortalError):
    """PIN unknown or not registered for the selected role."""


class AIParserError(OrderPortalError):
    """The language model could not be reached or returned an unusable answer."""


class SharePointAuthError(OrderPortalError):
    """SharePoint settings are missing or the token endpoint refused the request."""
