from __future__ import annotations

from typing import Optional, TextIO
import os
import shlex
import sys

from session_log import SessionLogger

from .cli import CLOSE, CommandEngine
from .service import NetworkService


BANNER = "Welcome to the Routing Network System. Type 'quit' to exit."


def run(engine: CommandEngine, stdin: TextIO, stdout: TextIO) -> None:
    stdout.write(BANNER + "\n")
    while True:
        stdout.write(engine.prompt)
        stdout.flush()
        line = stdin.readline()
        if not line:
            break
        res = engine.execute(line)
        if res.output == CLOSE:
            stdout.write("Exiting...\n")
            break
        if res.output:
            stdout.write(res.output + "\n")


def main(argv: Optional[list] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    session = SessionLogger.from_env()
    service = NetworkService(log_cb=session.add)
    engine = CommandEngine(service)

    topology = argv[0] if argv else os.getenv("NETROUTE_TOPOLOGY")
    if topology:
        res = engine.execute(f"load network {shlex.quote(topology)}")
        if res.output:
            print(res.output)

    try:
        run(engine, sys.stdin, sys.stdout)
    except KeyboardInterrupt:
        print()
    finally:
        log_path = os.getenv("NETROUTE_SESSION_LOG")
        if log_path:
            session.save_json(log_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
