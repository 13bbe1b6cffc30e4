# client.py
"""Command-line consumer for a Julius module-mode server.

Connects to the engine, logs its version, then prints the best hypothesis of
every recognition result as ``score<TAB>word(cm)word(cm)...`` with the
utterance-boundary silence words removed.

Usage:
    python client.py [--config=PATH] [--host=HOST] [--port=PORT] [-v]

Exits with code 1 when the engine cannot be reached.
"""

import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from julius_client.ClientOptions import ClientOptions, load_config
from julius_client.JuliusClient import JuliusClient
from julius_client.LoggingSetup import setup_logging
from julius_client.protocol.codec import best_hypothesis, spoken_words
from julius_client.protocol.types import EventKind, SentenceHypothesis

_SCRIPT_DIR = Path(__file__).resolve().parent
_DEFAULT_CONFIG = _SCRIPT_DIR / "config" / "julius_config.json"
_LOGS_DIR = _SCRIPT_DIR / "logs"

logger = logging.getLogger("JuliusCli")


def _parse_args(argv: list[str]) -> tuple[ClientOptions, bool]:
    """Parse CLI arguments into connection options.

    Returns:
        Tuple of (options, verbose).

    Raises:
        SystemExit: If --port is not an integer.
    """
    config_path = _DEFAULT_CONFIG
    host: str | None = None
    port: int | None = None
    verbose = "-v" in argv

    for arg in argv:
        if arg.startswith("--config="):
            config_path = Path(arg.split("=", 1)[1])
        elif arg.startswith("--host="):
            host = arg.split("=", 1)[1]
        elif arg.startswith("--port="):
            value = arg.split("=", 1)[1]
            try:
                port = int(value)
            except ValueError:
                print(f"ERROR: --port must be an integer, got {value!r}.", file=sys.stderr)
                sys.exit(1)

    options = ClientOptions.from_config(load_config(config_path)) if config_path.exists() else ClientOptions()
    if host is not None:
        options = replace(options, host=host)
    if port is not None:
        options = replace(options, port=port)
    return options, verbose


def format_result(hypotheses: list[SentenceHypothesis]) -> str:
    """Render the best hypothesis of a RECOGOUT payload as one output line."""
    best = best_hypothesis(hypotheses)
    if best is None:
        return ""
    words = "".join(f"{w.word}({w.cm})" for w in spoken_words(best))
    return f"{best.score}\t{words}"


def _print_result(hypotheses: list[SentenceHypothesis]) -> None:
    print(format_result(hypotheses), flush=True)


async def _run(options: ClientOptions) -> None:
    client = JuliusClient(replace(options, auto_connect=True))
    client.on(EventKind.RECOGOUT, _print_result)
    async with client:
        reply = asyncio.ensure_future(client.engine_info())
        closed = asyncio.ensure_future(client.wait_closed())
        await asyncio.wait({reply, closed}, return_when=asyncio.FIRST_COMPLETED)
        if reply.done():
            info = reply.result()
            logger.info("Connected to %s %s", info.type, info.version)
        else:
            reply.cancel()
            logger.warning("Engine closed the connection before reporting its version")
        await closed


if __name__ == "__main__":
    options, verbose = _parse_args(sys.argv[1:])
    setup_logging(_LOGS_DIR, verbose=verbose, is_frozen=getattr(sys, 'frozen', False))

    try:
        asyncio.run(_run(options))
    except KeyboardInterrupt:
        logger.info("Client interrupted.")
        sys.exit(0)
    except OSError as exc:
        logger.error("Client: failed to connect to %s:%s: %s", options.host, options.port, exc)
        sys.exit(1)
