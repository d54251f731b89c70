"""Command-line interface for chatting about a team and reviewing suggested edits."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import AsyncIterator, Dict, List, Optional, TextIO

from poke_chat.clients import ChatClient, ChatStreamClient, ChatStreamError
from poke_chat.config import load_settings
from poke_chat.models import Action, Team
from poke_chat.parsers import export_team, parse_team
from poke_chat.session import ChatSession


def _read_team_text(path: str) -> str:
    if path == "-":
        data = sys.stdin.read()
        if not data.strip():
            raise SystemExit("No team text provided on stdin.")
        return data
    file_path = Path(path)
    if not file_path.exists():
        raise SystemExit(f"File not found: {file_path}")
    return file_path.read_text(encoding="utf-8")


def _debug_print(enabled: bool, message: str) -> None:
    if enabled:
        sys.stderr.write(f"[debug] {message}\n")


class ReplayTransport:
    """Serves a recorded SSE transcript instead of calling the chat endpoint."""

    def __init__(self, path: Path, *, chunk_size: int = 64) -> None:
        self.path = path
        self.chunk_size = chunk_size

    async def stream_chat(
        self,
        message: str,
        team: Team,
        *,
        chat_history: Optional[List[Dict[str, str]]] = None,
    ) -> AsyncIterator[bytes]:
        data = self.path.read_bytes()
        for start in range(0, len(data), self.chunk_size):
            yield data[start : start + self.chunk_size]


def _describe_action(action: Action) -> str:
    lines = [f"[{action.type.value}] slot {action.slot}: {action.reason}"]
    payload = action.payload
    if payload:
        lines.append("  " + json.dumps(payload))
    for error in action.validation_errors:
        lines.append(f"  ! {error.field}: {error.message}")
    return "\n".join(lines)


def _review_actions(session: ChatSession, auto: Optional[str], *, out: TextIO) -> None:
    while session.pending is not None:
        action = session.pending
        print("\n" + _describe_action(action), file=out)
        choice = auto or input("Apply this change? [a]pply / [d]ismiss / [q]uit: ").strip().lower()[:1]
        if choice == "q":
            return
        if choice == "a" and action.is_valid:
            session.apply()
            print("Applied.", file=out)
        elif choice == "a":
            print("Change has validation errors; dismissing.", file=out)
            session.dismiss()
        else:
            session.dismiss()
            print("Dismissed.", file=out)


def _print_thinking(is_thinking: bool, _text: str) -> None:
    sys.stderr.write("[thinking...]\n" if is_thinking else "[done thinking]\n")


async def _run_chat(session: ChatSession, message: str, *, echo: bool) -> Optional[str]:
    printed = 0

    def on_chunk(content: str) -> None:
        nonlocal printed
        if echo:
            sys.stdout.write(content[printed:])
            sys.stdout.flush()
        printed = len(content)

    result = await session.send(
        message,
        on_chunk=on_chunk,
        on_thinking=_print_thinking if echo else None,
    )
    if echo:
        sys.stdout.write("\n")
    return result.content if result else None


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Chat about a Smogon team and review suggested changes")
    parser.add_argument(
        "team_file",
        help="Path to Smogon export text or '-' to read from stdin",
    )
    parser.add_argument(
        "--message",
        "-m",
        default="How can I improve this team?",
        help="Message to send to the assistant",
    )
    parser.add_argument(
        "--endpoint",
        help="Streaming chat endpoint URL (default: POKE_CHAT_STREAM_URL)",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--replay",
        help="Replay a recorded SSE transcript instead of calling the endpoint",
    )
    source.add_argument(
        "--provider",
        help="Ask a non-streaming provider under POKE_CHAT_API_URL (e.g. cloudflare, gemini) instead of streaming",
    )
    parser.add_argument(
        "--format",
        help="Format id for the team (default: POKE_CHAT_FORMAT)",
    )
    parser.add_argument(
        "--auto",
        choices=("apply", "dismiss"),
        help="Resolve every suggested change without prompting",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the final team and history as JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print debug progress information to stderr",
    )
    args = parser.parse_args(argv)

    _debug_print(args.debug, f"Arguments parsed: {args}")
    settings = load_settings(**({"format": args.format} if args.format else {}))
    team_text = _read_team_text(args.team_file)
    _debug_print(args.debug, f"Loaded team text ({len(team_text)} chars)")
    team = parse_team(team_text, format_hint=settings.format) if team_text.strip() else Team(format=settings.format)
    _debug_print(args.debug, f"Parsed team with {len(team.pokemon)} Pokémon")

    if args.replay:
        transport = ReplayTransport(Path(args.replay))
        _debug_print(args.debug, f"Replaying transcript {args.replay}")
    else:
        transport = ChatStreamClient(url=args.endpoint, settings=settings)
        _debug_print(args.debug, f"Streaming from {transport.url}")

    session = ChatSession(
        transport,
        team=team,
        history_limit=settings.history_limit,
        debug_logger=(lambda msg: _debug_print(args.debug, msg)),
    )
    session.history.push_state(team, "Loaded team", "import")

    try:
        if args.provider:
            client = ChatClient(settings=settings, debug_logger=(lambda msg: _debug_print(args.debug, msg)))
            _debug_print(args.debug, f"Asking {client.base_url}/{args.provider}")
            result = session.ask(args.message, client, provider=args.provider)
            if not args.json:
                print(result.content)
        else:
            asyncio.run(_run_chat(session, args.message, echo=not args.json))
    except ChatStreamError as exc:
        sys.stderr.write(f"Chat request failed: {exc}\n")
        return 1

    auto = {"apply": "a", "dismiss": "d"}.get(args.auto or "")
    if args.json and not auto:
        auto = "d"
    _review_actions(session, auto, out=sys.stderr if args.json else sys.stdout)

    final = session.team
    if args.json:
        payload = {
            "team": final.to_dict(),
            "history": [
                {"label": entry.label, "origin": entry.origin, "timestamp": entry.timestamp.isoformat()}
                for entry in session.history.entries
            ],
            "messages": [{"role": m.role, "content": m.content} for m in session.chat_log.messages],
        }
        json.dump(payload, sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        print("\nFinal team:\n")
        print(export_team(final) or "(empty)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
