"""Connection options for JuliusClient and their JSON config file."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 10500
DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True)
class ClientOptions:
    """Connection options.

    Args:
        auto_connect: Connect when the client is entered as an async context manager.
        host: Address of the Julius module server.
        port: Module server port (Julius ``-module`` default is 10500).
        encoding: Text encoding of the socket stream (must match the engine's
                  output charset, e.g. ``euc-jp`` for some Japanese models).
    """

    auto_connect: bool = True
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    encoding: str = DEFAULT_ENCODING

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ClientOptions":
        """Build options from the ``julius`` section of a config dict.

        Missing keys fall back to the defaults.

        Args:
            config: Parsed config file content.

        Returns:
            ClientOptions instance.
        """
        section = config.get("julius", {})
        return cls(
            auto_connect=bool(section.get("auto_connect", True)),
            host=section.get("host", DEFAULT_HOST),
            port=int(section.get("port", DEFAULT_PORT)),
            encoding=section.get("encoding", DEFAULT_ENCODING),
        )


def load_config(config_path: Path) -> dict[str, Any]:
    """Read a JSON config file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    with open(config_path, encoding="utf-8") as f:
        return json.load(f)
