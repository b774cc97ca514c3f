"""
Persisted certificate record for a save directory.

Tracks the hosts the current certificate was issued for and the content hash
of the key and cert files written at that time. The record is only updated
after a certificate has been written successfully, so a mismatch with the
files on disk means something changed them since.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field

from devcert.state.document import JsonDocument

RECORD_FILE_NAME = "record.json"


class CertificateHash(BaseModel):
    key: str | None = None
    cert: str | None = None


class CertificateRecordData(BaseModel):
    hosts: list[str] = Field(default_factory=list)
    hash: CertificateHash = Field(default_factory=CertificateHash)


class CertificateRecord(JsonDocument[CertificateRecordData]):
    """Hosts and file hashes of the last generated certificate."""

    model = CertificateRecordData

    @classmethod
    def for_save_path(cls, save_path: str | Path) -> CertificateRecord:
        return cls(Path(save_path) / RECORD_FILE_NAME)

    @property
    def hosts(self) -> list[str]:
        return list(self.data.hosts)

    @property
    def hash(self) -> CertificateHash:
        return self.data.hash

    def contains(self, hosts: Iterable[str]) -> bool:
        """True if the recorded hosts are exactly this set, in any order."""
        return set(self.data.hosts) == set(hosts)

    def equal(self, hash: CertificateHash) -> bool:
        """True if both file hashes match the recorded ones.

        A missing file (None hash) never matches.
        """
        recorded = self.data.hash
        if None in (recorded.key, recorded.cert, hash.key, hash.cert):
            return False
        return recorded.key == hash.key and recorded.cert == hash.cert
