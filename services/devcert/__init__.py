"""devcert: locally-trusted development certificates managed through mkcert."""

from devcert.mkcert import Certificate, Mkcert

__all__ = ["Certificate", "Mkcert"]
