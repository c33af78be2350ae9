"""Provisioning - batch facade and worker pool."""

from .pool import ProvisioningPool
from .provisioner import Provisioner

__all__ = ["Provisioner", "ProvisioningPool"]
