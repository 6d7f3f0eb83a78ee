"""unit-doctor: journal and unit-dependency diagnostics for systemd hosts."""

__version__ = "0.3.0"
