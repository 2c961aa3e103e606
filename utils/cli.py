"""CLI utility functions for user interaction."""
import json
import sys


def read_request(prompt: str = "🛠  Enter a JSON action request: ") -> str:
    """Read one action request from stdin."""
    print(prompt, end="", flush=True)
    line = sys.stdin.readline()
    if not line:  # EOF
        raise KeyboardInterrupt

    request = line.strip()
    if request.lower() in {"bye", "quit", "exit", "q"}:
        raise KeyboardInterrupt

    return request


def print_envelope(envelope: str) -> None:
    """Pretty-print a tool envelope to stdout."""
    try:
        decoded = json.loads(envelope)
    except json.JSONDecodeError:
        print(envelope)
        return

    if isinstance(decoded, dict) and set(decoded) == {"error"}:
        print(f"❌ {decoded['error']}")
    else:
        print(f"✅ {json.dumps(decoded, indent=2, ensure_ascii=False)}")
