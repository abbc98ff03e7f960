"""Custom exceptions for certin-mapper."""


class CertInMapperError(Exception):
    """Base exception for all certin-mapper operations."""


class ConfigurationError(CertInMapperError):
    """Raised when configuration validation fails."""


class SBOMValidationError(CertInMapperError):
    """Raised when the input document is not a usable CycloneDX SBOM."""


class FileProcessingError(CertInMapperError):
    """Raised when file operations fail."""
