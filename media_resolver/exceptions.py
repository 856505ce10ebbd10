class ResolverError(Exception):
    """Base class for application-specific errors."""
    pass

class ConfigError(ResolverError):
    """Errors related to configuration loading, validation or missing defaults."""
    pass

class LookupFailed(ResolverError):
    """Transport or parse failure while talking to a remote metadata service."""
    pass

class ShowNotFound(ResolverError):
    """A show search completed but returned no results."""
    pass

class TransportError(ResolverError):
    """The document fetcher could not retrieve a resource."""
    pass

class FormatError(ResolverError):
    """The document fetcher retrieved a resource that could not be parsed."""
    pass

class SeasonOutOfBounds(ResolverError):
    """A season was requested that the show's episode catalog does not contain."""

    def __init__(self, show_name: str, requested: int, max_known: int):
        self.show_name = show_name
        self.requested = requested
        self.max_known = max_known
        super().__init__(f"{show_name} has only {max_known} seasons (requested season {requested}).")

    def __reduce__(self):
        return (type(self), (self.show_name, self.requested, self.max_known))
