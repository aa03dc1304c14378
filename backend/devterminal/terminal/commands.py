"""Parsing of terminal command lines into API calls."""
from __future__ import annotations

from dataclasses import dataclass, field

HELP_TEXT = """Available commands:
  signup <username> <password> - Create a new account
  login <username> <password>  - Log into your account
  logout                       - Log out of your account
  post <message>               - Create a new post
  like <postId>                - Like or unlike a post
  follow <userId>              - Follow or unfollow a user
  profile <username>           - Show a user's profile
  feed                         - View posts from you and people you follow
  clear                        - Clear the terminal
  help                         - Show this help message"""

USAGE = {
    "signup": "Usage: signup <username> <password>",
    "login": "Usage: login <username> <password>",
    "logout": "Usage: logout",
    "post": "Usage: post <message>",
    "like": "Usage: like <postId>",
    "follow": "Usage: follow <userId>",
    "profile": "Usage: profile <username>",
    "feed": "Usage: feed",
    "clear": "Usage: clear",
    "help": "Usage: help",
}

# Exact argument counts; ``post`` takes any number of words (at least one).
_ARITY = {
    "signup": 2,
    "login": 2,
    "logout": 0,
    "like": 1,
    "follow": 1,
    "profile": 1,
    "feed": 0,
    "clear": 0,
    "help": 0,
}

COMMANDS = tuple(USAGE)


class CommandError(ValueError):
    """Raised for a malformed command line; never reaches the server."""


@dataclass(slots=True)
class ParsedCommand:
    name: str
    args: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(self.args)

    @property
    def target_id(self) -> int:
        return int(self.args[0])


def parse_command(line: str) -> ParsedCommand:
    parts = line.split()
    if not parts:
        raise CommandError("Type 'help' for available commands.")

    name, args = parts[0].lower(), parts[1:]
    if name not in USAGE:
        raise CommandError(f"Command not found: {name}. Type 'help' for available commands.")

    if name == "post":
        if not args:
            raise CommandError(USAGE[name])
    elif len(args) != _ARITY[name]:
        raise CommandError(USAGE[name])

    if name in ("like", "follow"):
        try:
            int(args[0])
        except ValueError as exc:
            raise CommandError(USAGE[name]) from exc

    return ParsedCommand(name=name, args=args)
