"""Exception types raised by masi_agreement."""


class MasiAgreementError(Exception):
    """Base class for all errors raised by this package."""


class MissingResponseError(MasiAgreementError, ValueError):
    """A missing response reached code that needs a label set."""


class DomainError(MasiAgreementError, ValueError):
    """A similarity is undefined for the given label sets."""


class ConfigurationError(MasiAgreementError, ValueError):
    """Invalid dataset or experiment configuration."""
