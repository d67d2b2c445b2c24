"""Context object shared across connection threads."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tinyfs.bootstrap.config import ServerConfig
from tinyfs.lifecycle.state import ServerLifecycle


@dataclass(frozen=True)
class WorkerContext:
    """Read-only dependencies shared by every connection handler."""

    storage_root: Path
    config: ServerConfig
    lifecycle: Optional[ServerLifecycle] = None
