"""Root of the roomlayout exception hierarchy."""


class LayoutError(Exception):
    """Base class for every error raised by roomlayout."""

    pass
