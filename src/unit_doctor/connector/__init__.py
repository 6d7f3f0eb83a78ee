"""Connector package - how commands reach the host being diagnosed."""

from unit_doctor.connector.base import CommandResult, Connector
from unit_doctor.connector.local import LocalConnector
from unit_doctor.connector.ssh import SSHConfig, SSHConnector

__all__ = ["CommandResult", "Connector", "LocalConnector", "SSHConfig", "SSHConnector"]
