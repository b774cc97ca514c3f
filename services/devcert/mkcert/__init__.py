"""Certificate lifecycle management through mkcert."""

from devcert.mkcert.manager import Certificate, CertificateGenerationError, Mkcert, ToolBinary

__all__ = ["Certificate", "CertificateGenerationError", "Mkcert", "ToolBinary"]
