"""CLI state container."""

import typing as t

from ..config.settings import Settings
from ..provisioning import Provisioner
from ..resolution.preresolution import PreResolutionProvider

ProvisionerFactory = t.Callable[..., Provisioner]


class CLIState:
    """Application state container for CLI commands.

    Holds Settings and the factory used to build the Provisioner, so tests
    can inject a mocked provisioner without touching the network.
    """

    def __init__(
        self,
        settings: Settings,
        provisioner_factory: ProvisionerFactory | None = None,
    ):
        self.settings = settings
        self._provisioner_factory = provisioner_factory or Provisioner

    def create_provisioner(
        self, pre_resolution: PreResolutionProvider | None = None
    ) -> Provisioner:
        return self._provisioner_factory(
            self.settings, pre_resolution=pre_resolution
        )
