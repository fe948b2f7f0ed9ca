"""Exception types raised across the dashboard."""


class DashboardError(Exception):
    """Base class for dashboard errors."""


class FilterError(DashboardError):
    """Unknown filter field or a value-level operation on a non-set dimension."""


class IngestionError(DashboardError):
    """A data source could not be turned into mention records."""


class ConfigurationError(DashboardError):
    """Required configuration is missing."""


class ChatError(DashboardError):
    """The language-model endpoint could not produce a reply."""
