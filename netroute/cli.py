from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional
import shlex

from .service import NetworkService, Outcome


class CommandError(Exception):
    pass


AMBIGUOUS_COMMAND = "% Ambiguous command."
CLOSE = "__CLOSE__"

COMMANDS = [
    "load network <file>",
    "list subnets",
    "list range <subnet>",
    "list systems <subnet>",
    "add computer <subnet> <ip>",
    "add connection <ip1> <ip2> [<weight>]",
    "remove computer <subnet> <ip>",
    "remove connection <ip1> <ip2>",
    "send packet <from-ip> <to-ip>",
    "help",
    "quit",
]

_SUBCOMMANDS = {
    "load": ["network"],
    "list": ["subnets", "range", "systems"],
    "add": ["computer", "connection"],
    "remove": ["computer", "connection"],
    "send": ["packet"],
}


@dataclass
class CommandResult:
    output: str = ""
    prompt: str = "> "


def _error(outcome: Outcome) -> str:
    return f"Error, {outcome.message}"


class CommandEngine:
    """Line-oriented front end for a :class:`NetworkService`.

    Parses one command, runs it through the service and returns the text to
    print. Keywords may be abbreviated to any unique prefix ("li sub").
    """

    def __init__(self, service: Optional[NetworkService] = None, prompt: str = "> "):
        self.service = service if service is not None else NetworkService()
        self.prompt = prompt

    def execute(self, line: str) -> CommandResult:
        stripped = (line or "").strip()
        if stripped == "":
            return CommandResult(output="", prompt=self.prompt)
        if stripped == "?" or stripped.endswith(" ?"):
            return CommandResult(output=self._help(stripped[:-1].strip()), prompt=self.prompt)

        try:
            argv = shlex.split(stripped)
        except ValueError:
            argv = stripped.split()

        try:
            argv = self._normalize_argv(argv)
            out = self._dispatch(argv)
        except CommandError as e:
            out = str(e)
        return CommandResult(output=out, prompt=self.prompt)

    def _expand_unique_prefix(self, token: str, candidates: List[str]) -> str:
        t = token.lower()
        if t in candidates:
            return t
        matches = [c for c in candidates if c.startswith(t)]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise CommandError(AMBIGUOUS_COMMAND)
        return t

    def _normalize_argv(self, argv: List[str]) -> List[str]:
        if not argv:
            return argv
        argv = list(argv)
        argv[0] = self._expand_unique_prefix(argv[0], ["help", "quit", "exit"] + sorted(_SUBCOMMANDS))
        subs = _SUBCOMMANDS.get(argv[0])
        if subs and len(argv) >= 2:
            argv[1] = self._expand_unique_prefix(argv[1], subs)
        return argv

    def _help(self, prefix: str) -> str:
        p = prefix.lower().strip()
        if not p:
            return "\n".join(COMMANDS)
        return "\n".join([c for c in COMMANDS if c.startswith(p)]) or "% No help for that"

    def _dispatch(self, argv: List[str]) -> str:
        cmd = argv[0]
        if cmd in ("quit", "exit"):
            return CLOSE
        if cmd == "help":
            return self._help(" ".join(argv[1:]))
        if cmd == "load":
            return self._cmd_load(argv)
        if cmd == "list":
            return self._cmd_list(argv)
        if cmd == "add":
            return self._cmd_add(argv)
        if cmd == "remove":
            return self._cmd_remove(argv)
        if cmd == "send":
            return self._cmd_send(argv)
        raise CommandError(f"Error, Unknown command '{argv[0]}'. Please try again.")

    def _cmd_load(self, argv: List[str]) -> str:
        if len(argv) != 3 or argv[1] != "network":
            raise CommandError("Error, Invalid 'load' command format. Expected 'load network <file>'.")
        res = self.service.load_file(argv[2])
        if not res.ok:
            return _error(res)
        rendered = self.service.render()
        return rendered.value if rendered.ok else _error(rendered)

    def _cmd_list(self, argv: List[str]) -> str:
        if len(argv) < 2:
            raise CommandError("Error, Missing argument for 'list' command.")
        what = argv[1]
        if what == "subnets":
            if len(argv) != 2:
                raise CommandError("Error, Expected 'list subnets'.")
            res = self.service.list_subnets()
            if res.ok and not res.value:
                return "Error, No subnets found."
            return " ".join(res.value) if res.ok else _error(res)
        if what in ("range", "systems"):
            if len(argv) != 3:
                raise CommandError(f"Error, Expected 'list {what} <subnet>'.")
            if what == "range":
                res = self.service.subnet_range(argv[2])
            else:
                res = self.service.list_systems(argv[2])
            return " ".join(res.value) if res.ok else _error(res)
        raise CommandError("Error, Invalid 'list' command. Expected 'subnets', 'range', or 'systems'.")

    def _parse_weight(self, raw: str) -> int:
        try:
            return int(raw)
        except ValueError:
            raise CommandError("Error, Invalid weight format.")

    def _cmd_add(self, argv: List[str]) -> str:
        if len(argv) < 4:
            raise CommandError("Error, Invalid 'add' command format.")
        if argv[1] == "computer":
            if len(argv) != 4:
                raise CommandError("Error, Expected 'add computer <subnet> <ip>'.")
            res = self.service.add_system(argv[2], argv[3])
            return "" if res.ok else _error(res)
        if argv[1] == "connection":
            if len(argv) == 4:
                # Router links need no weight; intra-subnet links reject 0.
                weight = 0
            elif len(argv) == 5:
                weight = self._parse_weight(argv[4])
            else:
                raise CommandError("Error, Expected 'add connection <ip1> <ip2> [<weight>]'.")
            res = self.service.add_connection(argv[2], argv[3], weight)
            return "" if res.ok else _error(res)
        raise CommandError("Error, Invalid 'add' command. Expected 'computer' or 'connection'.")

    def _cmd_remove(self, argv: List[str]) -> str:
        if len(argv) != 4:
            raise CommandError("Error, Invalid remove command format.")
        if argv[1] == "computer":
            res = self.service.remove_system(argv[2], argv[3])
        elif argv[1] == "connection":
            res = self.service.remove_connection(argv[2], argv[3])
        else:
            raise CommandError("Error, Invalid remove command. Expected 'connection' or 'computer'.")
        return "" if res.ok else _error(res)

    def _cmd_send(self, argv: List[str]) -> str:
        if len(argv) != 4 or argv[1] != "packet":
            raise CommandError("Error, Invalid 'send packet' command format. Expected 'send packet <from> <to>'.")
        res = self.service.route(argv[2], argv[3])
        return " ".join(res.value) if res.ok else _error(res)
