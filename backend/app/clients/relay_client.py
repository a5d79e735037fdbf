# app/clients/relay_client.py

import argparse
import json
import os
import sys

import requests

# =========================
# CONFIGURATION
# =========================

SERVER_URL = os.getenv("RELAY_URL", "http://127.0.0.1:8080")
DEFAULT_TIMEOUT = 10.0


class RelayClientError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


# =========================
# RELAY CLIENT
# =========================

class RelayClient:
    def __init__(self, base_url: str = SERVER_URL, timeout: float = DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _call(self, method: str, path: str, payload: dict = None):
        resp = self.session.request(
            method,
            f"{self.base_url}{path}",
            json=payload,
            timeout=self.timeout,
        )
        try:
            body = resp.json()
        except ValueError:
            body = {}

        if resp.status_code >= 400:
            message = resp.text
            if isinstance(body, dict):
                message = body.get("error") or body.get("warning") or message
            raise RelayClientError(resp.status_code, message)
        return body

    def send(self, topic: str, author: str, message: str) -> dict:
        """Returns {id, code, expiresAt}"""
        return self._call("POST", "/send", {"topic": topic, "author": author, "message": message})

    def receive(self, code: str) -> dict:
        return self._call("POST", "/receive", {"code": code})

    def health(self) -> bool:
        return self._call("GET", "/health").get("ok") is True


# =========================
# COMMAND LINE
# =========================

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Send or receive QuickText messages")
    parser.add_argument("--url", default=SERVER_URL)
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send")
    send.add_argument("--topic", required=True)
    send.add_argument("--author", required=True)
    send.add_argument("message")

    receive = sub.add_parser("receive")
    receive.add_argument("code")

    args = parser.parse_args(argv)
    client = RelayClient(args.url)

    try:
        if args.command == "send":
            result = client.send(args.topic, args.author, args.message)
        else:
            result = client.receive(args.code)
    except RelayClientError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1
    except requests.RequestException as e:
        print(f"❌ Relay unreachable: {e}", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
