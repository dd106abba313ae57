"""Configuration via pydantic-settings — 12-factor app style."""
from __future__ import annotations

import socket

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """ccmlog configuration — loaded from env vars / .env file."""

    log_dir: str = Field(default=r"C:\Windows\CCM\Logs", description="Directory bare component names resolve against")
    tail_lines: int = Field(default=1000, description="Lines read from the end of each log (0 = whole file)")
    computer_name: str = Field(default_factory=socket.gethostname, description="Host name stamped on records")
    inclusive_window: bool = Field(default=False, description="Keep entries stamped exactly on --after/--before")
    on_error: str = Field(default="warn", description="Malformed log policy (warn|raise)")
    default_output: str = Field(default="stream", description="Default output format (stream|json|csv)")

    class Config:
        env_prefix = "CCMLOG_"
        env_file = ".env"


settings = Settings()
