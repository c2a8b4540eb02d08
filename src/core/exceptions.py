class DomainError(Exception):
    """Base class for domain-specific errors."""

    pass


class BenchmarkNotFoundError(DomainError):
    """Exception raised when a benchmark id has no prompt on disk."""

    pass


class ModelNotFoundError(DomainError):
    """Exception raised when a model id is not in the registry."""

    pass


class ResultNotFoundError(DomainError):
    """Exception raised when no stored result exists for a benchmark/model pair."""

    pass
