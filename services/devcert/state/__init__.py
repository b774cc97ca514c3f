"""
Persisted state for a save directory.

Each store is a JSON document owned by one save directory: ToolConfig keeps
the mkcert version, CertificateRecord keeps what the current certificate
covers.
"""

from devcert.state.config import ToolConfig
from devcert.state.record import CertificateHash, CertificateRecord

__all__ = ["CertificateHash", "CertificateRecord", "ToolConfig"]
