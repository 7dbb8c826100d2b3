"""Print the tool descriptors the server advertises, without starting the transport."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent.parent
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from winsys.container import build_container  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Dump the name, description and input schema of every tool as JSON."
    )
    parser.add_argument(
        "--tool",
        action="append",
        default=[],
        help="Only include the named tool (repeatable)",
    )
    parser.add_argument(
        "--names-only",
        action="store_true",
        help="Print one tool name per line instead of JSON",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation (default: 2)")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    registry = build_container().registry
    descriptors = registry.list_tools()
    if args.tool:
        unknown = sorted(set(args.tool) - set(registry.names()))
        if unknown:
            print(f"Unknown tool(s): {', '.join(unknown)}", file=sys.stderr)
            return 2
        descriptors = [d for d in descriptors if d.name in args.tool]

    if args.names_only:
        for descriptor in descriptors:
            print(descriptor.name)
        return 0

    payload = [descriptor.model_dump() for descriptor in descriptors]
    print(json.dumps(payload, indent=args.indent, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
