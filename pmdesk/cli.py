"""pmdesk — ask an installed agent CLI about your project.

Usage:
    pmdesk ask "What changed this week?"
    pmdesk ask "Summarize" --project ~/code/myproj --timeout 60
    pmdesk check
    pmdesk serve --port 8091
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import Any

from .agents.tools import ToolResolver
from .ask import answer_question
from .config import get_config
from .log_config import setup_logging

NO_COLOR = os.environ.get("NO_COLOR") or not sys.stdout.isatty()

_RESET = "\033[0m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_DIM = "\033[2m"


def c(text: str, code: str) -> str:
    if NO_COLOR:
        return text
    return f"{code}{text}{_RESET}"


def out_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def error(msg: str) -> None:
    print(c(f"Error: {msg}", _RED), file=sys.stderr)


# ── Commands ──


def cmd_ask(args) -> int:
    result = asyncio.run(
        answer_question(args.question, args.project, timeout=args.timeout)
    )
    if args.json_output:
        out_json(result.to_dict())
        return 0 if result.success else 1
    if not result.success:
        error(result.error or "unknown error")
        return 1
    print(result.answer)
    if result.tool:
        print(c(f"(answered by {result.tool})", _DIM), file=sys.stderr)
    return 0


def cmd_check(args) -> int:
    cfg = get_config()
    status = asyncio.run(ToolResolver(probe_timeout=cfg.invocation.probe_timeout_sec).status())
    if args.json_output:
        out_json(status)
    else:
        for name, ok in status.items():
            if name in ("any_installed", "current"):
                continue
            mark = c("installed", _GREEN) if ok else c("missing", _RED)
            print(f"  {name:<10} {mark}")
        print(f"  current    {status['current'] or '-'}")
    return 0 if status["any_installed"] else 1


def cmd_serve(args) -> int:
    import uvicorn

    cfg = get_config()
    uvicorn.run(
        "pmdesk.server:app",
        host=args.host or cfg.server.host,
        port=args.port or cfg.server.port,
        log_level=cfg.logging.level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pmdesk", description=__doc__.splitlines()[0])
    p.add_argument("--json", dest="json_output", action="store_true", help="JSON output")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    sub = p.add_subparsers(dest="command", required=True)

    a = sub.add_parser("ask", help="Ask a question about the project")
    a.add_argument("question")
    a.add_argument("--project", default=None, help="Project directory (default: active project or cwd)")
    a.add_argument("--timeout", type=float, default=None, help="Seconds before the CLI is killed")
    a.set_defaults(func=cmd_ask)

    sub.add_parser("check", help="Show which agent CLIs are installed").set_defaults(func=cmd_check)

    s = sub.add_parser("serve", help="Run the HTTP API")
    s.add_argument("--host", default=None)
    s.add_argument("--port", type=int, default=None)
    s.set_defaults(func=cmd_serve)
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        level = args.log_level or get_config().logging.level
    except ValueError as e:
        error(str(e))
        return 2
    setup_logging(level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
