"""Exceptions raised by the bill estimator."""


class BillEstimatorError(Exception):
    """Base exception for bill estimation errors."""
    pass


class UnrecognizedFormatError(BillEstimatorError, ValueError):
    """A timestamp string is not DD-MM-YYYY HH:MM or DD/MM/YYYY HH:MM."""
    pass


class InvalidOrderingError(BillEstimatorError):
    """The first import reading is older than the last one."""
    pass


class MissingConsumptionDataError(BillEstimatorError):
    """Estimation was requested without any import readings."""
    pass


class PricingDocumentError(BillEstimatorError, ValueError):
    """The provider pricing document is missing required fields."""
    pass
