"""Terminal state machine: session, history and the output buffer."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import httpx

from .client import ApiClient, ApiError
from .commands import HELP_TEXT, CommandError, ParsedCommand, parse_command

logger = logging.getLogger(__name__)

WELCOME = (
    "Welcome to DevTerminal - A Social Platform for Developers!",
    'Type "help" for available commands.',
)
SEPARATOR = "─" * 40


class OutputKind(str, Enum):
    NEUTRAL = "neutral"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(slots=True)
class OutputLine:
    text: str
    kind: OutputKind = OutputKind.NEUTRAL


@dataclass(slots=True)
class Session:
    """Identity of the logged-in user; lives only as long as the process."""

    user_id: int
    username: str
    token: str


class CommandHistory:
    """Command lines entered this session, oldest first.

    Up/down recall belongs to the line editor; ``on_record`` hands each
    recorded line to it (``readline.add_history`` in the CLI).
    """

    def __init__(self, on_record: Callable[[str], None] | None = None) -> None:
        self._entries: list[str] = []
        self._on_record = on_record

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def last(self) -> str | None:
        return self._entries[-1] if self._entries else None

    def record(self, line: str) -> None:
        self._entries.append(line)
        if self._on_record is not None:
            self._on_record(line)


class Terminal:
    """Run command lines against the API and collect the lines to display."""

    def __init__(
        self,
        client: ApiClient,
        on_clear: Callable[[], None] | None = None,
        history: CommandHistory | None = None,
    ) -> None:
        self.client = client
        self.session: Session | None = None
        self.history = history if history is not None else CommandHistory()
        self.lines: list[OutputLine] = [OutputLine(text) for text in WELCOME]
        self._on_clear = on_clear

    @property
    def prompt(self) -> str:
        user = self.session.username if self.session else "guest"
        return f"{user}@devterminal$"

    def write(self, text: str, kind: OutputKind = OutputKind.NEUTRAL) -> None:
        self.lines.append(OutputLine(text, kind))

    async def execute(self, line: str) -> list[OutputLine]:
        """Run one command line and return the output lines it produced."""
        line = line.strip()
        if not line:
            return []

        self.history.record(line)
        start = len(self.lines)
        self.write(f"{self.prompt} {line}")

        try:
            command = parse_command(line)
            handler = getattr(self, f"_cmd_{command.name}")
            await handler(command)
        except CommandError as exc:
            self.write(str(exc), OutputKind.ERROR)
        except ApiError as exc:
            self.write(exc.message, OutputKind.ERROR)
        except httpx.HTTPError as exc:
            logger.debug("Request failed: %r", exc)
            self.write(f"Unable to reach server: {exc}", OutputKind.ERROR)

        return self.lines[start:]

    def _require_session(self, action: str) -> Session | None:
        if self.session is None:
            self.write(f"You must be logged in to {action}", OutputKind.ERROR)
        return self.session

    def _start_session(self, data: dict[str, Any]) -> None:
        user = data["user"]
        self.session = Session(user_id=user["id"], username=user["username"], token=data["token"])

    async def _cmd_signup(self, command: ParsedCommand) -> None:
        username, password = command.args
        self._start_session(await self.client.register(username, password))
        self.write(f"Account created successfully! Welcome, {username}!", OutputKind.SUCCESS)

    async def _cmd_login(self, command: ParsedCommand) -> None:
        username, password = command.args
        self._start_session(await self.client.login(username, password))
        self.write(f"Welcome back, {username}!", OutputKind.SUCCESS)

    async def _cmd_logout(self, command: ParsedCommand) -> None:
        if self.session is None:
            self.write("You are not logged in", OutputKind.ERROR)
            return
        self.session = None
        self.write("Logged out successfully", OutputKind.SUCCESS)

    async def _cmd_post(self, command: ParsedCommand) -> None:
        session = self._require_session("post")
        if session is None:
            return
        post = await self.client.create_post(session.token, command.text)
        self.write(f"Post created successfully! (id: {post['id']})", OutputKind.SUCCESS)

    async def _cmd_like(self, command: ParsedCommand) -> None:
        session = self._require_session("like posts")
        if session is None:
            return
        message = await self.client.toggle_like(session.token, command.target_id)
        self.write(message, OutputKind.SUCCESS)

    async def _cmd_follow(self, command: ParsedCommand) -> None:
        session = self._require_session("follow users")
        if session is None:
            return
        message = await self.client.toggle_follow(session.token, command.target_id)
        self.write(message, OutputKind.SUCCESS)

    async def _cmd_profile(self, command: ParsedCommand) -> None:
        session = self._require_session("view profiles")
        if session is None:
            return
        profile = await self.client.profile(session.token, command.args[0])
        self.write(f"@{profile['username']} (id: {profile['id']})")
        self.write(f"Joined: {_format_timestamp(profile['created_at'])}")
        self.write(
            f"Posts: {profile['posts_count']}  "
            f"Followers: {profile['followers_count']}  "
            f"Following: {profile['following_count']}"
        )
        if profile["is_following"]:
            self.write("You follow this user")

    async def _cmd_feed(self, command: ParsedCommand) -> None:
        session = self._require_session("view your feed")
        if session is None:
            return
        posts = await self.client.feed(session.token)
        self.write("=== Your Feed ===")
        if not posts:
            self.write("No posts yet. Follow someone or write a post!")
        for post in posts:
            self.write(f"@{post['username']} #{post['id']} ({_format_timestamp(post['created_at'])})")
            self.write(post["content"])
            self.write(f"Likes: {post['like_count']}")
            self.write(SEPARATOR)

    async def _cmd_clear(self, command: ParsedCommand) -> None:
        self.lines.clear()
        if self._on_clear is not None:
            self._on_clear()

    async def _cmd_help(self, command: ParsedCommand) -> None:
        self.write(HELP_TEXT)


def _format_timestamp(value: str) -> str:
    return value[:19].replace("T", " ")
