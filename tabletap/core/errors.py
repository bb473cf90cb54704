"""Error taxonomy shared by the cart, order and store layers."""


class TableTapError(Exception):
    """Base class for errors reported to the calling observer."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(TableTapError):
    """Malformed input: empty cart, unknown table, bad quantity or add-on."""

    status_code = 422


class NotFoundError(TableTapError):
    """Referenced order (or menu item, table) does not exist."""

    status_code = 404


class InvalidTransitionError(TableTapError):
    """Requested status is not the legal next status for the order."""

    status_code = 409

    def __init__(self, detail: str, current_status=None, requested_status=None):
        super().__init__(detail)
        self.current_status = current_status
        self.requested_status = requested_status


class StoreUnavailableError(TableTapError):
    """The order store could not be reached; nothing was changed."""

    status_code = 503
