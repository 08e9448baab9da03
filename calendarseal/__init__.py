"""calendarseal - weekly calendar digest as an encrypted artifact.

Reads ICS feeds, expands recurring events, keeps every occurrence inside a
forward-looking window, reduces each to title/start/end and writes the result
as AES-CTR encrypted JSON.
"""

__version__ = "0.1.0"

from .config_loader import Config, load_config
from .exceptions import CalendarSealError
from .pipeline import RunResult, decrypt_artifact, run

__all__ = [
    "CalendarSealError",
    "Config",
    "RunResult",
    "__version__",
    "decrypt_artifact",
    "load_config",
    "run",
]
