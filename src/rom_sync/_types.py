"""Type aliases used throughout rom_sync."""

from __future__ import annotations

import os  # noqa: TC003
from collections.abc import Callable
from datetime import datetime  # noqa: TC003
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]  # noqa: UP007
Clock = Callable[[], datetime]
