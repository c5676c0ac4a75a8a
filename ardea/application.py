"""
Application context shared by every boot-time component.
"""

from dataclasses import dataclass, field
from typing import Optional

from .di import Container
from .metadata import MetadataRegistry, registry as default_registry


@dataclass
class ApplicationContext:
    """
    Explicit boot state of one application.

    Attributes:
        registry: Metadata store the decorators wrote into
        container: Service container of this application
    """
    registry: MetadataRegistry = field(default_factory=lambda: default_registry)
    container: Optional[Container] = None

    def __post_init__(self):
        if self.container is None:
            self.container = Container(self.registry)
