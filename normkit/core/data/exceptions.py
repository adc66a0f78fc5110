class NormalizerError(Exception):
    """
    Base exception for all normalization and container failures.
    """

    pass


class InvalidInputError(NormalizerError, TypeError):
    """
    Raised when a value is neither null, scalar, sequence, mapping nor object-like.
    """

    pass


class StructureTooDeepError(NormalizerError, ValueError):
    """
    Raised when nesting exceeds the recursion limit (usually a cyclic structure).
    """

    pass


class NonNumericValueError(NormalizerError, TypeError):
    """
    Raised when a numeric aggregate meets a value that cannot be read as a number.
    """

    pass
