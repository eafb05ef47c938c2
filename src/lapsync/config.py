"""Runtime settings read from the environment (and a ``.env`` file)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv


@dataclass(frozen=True)
class Settings:
    """Knobs for the web app and command-line tools.

    Algorithm thresholds that are not listed here keep the defaults of their
    classes.
    """

    log_level: str = "INFO"
    max_match_distance_m: float = 50.0
    search_window_s: float = 20.0

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> Settings:
        """Read ``LAPSYNC_*`` variables, loading ``.env`` first unless disabled.

        Raises:
            ValueError: If a numeric variable is not a number.
        """
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))  # must run before env vars are consumed
        return cls(
            log_level=os.environ.get("LAPSYNC_LOG_LEVEL", cls.log_level).upper(),
            max_match_distance_m=float(
                os.environ.get("LAPSYNC_MAX_MATCH_DISTANCE_M", cls.max_match_distance_m)
            ),
            search_window_s=float(
                os.environ.get("LAPSYNC_SEARCH_WINDOW_S", cls.search_window_s)
            ),
        )
