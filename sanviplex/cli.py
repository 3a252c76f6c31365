from __future__ import annotations

import argparse
import getpass
import json
import os
import sys
from datetime import datetime, timezone
from typing import List, Optional

from .app import create_app
from .client import ApiClient
from .config import API_BASE_URL_DEFAULT, ClientConfig
from .embeds import PROVIDERS, movie_embed_url, tv_embed_url
from .errors import ApiError
from .models import VerificationRequired
from .store import FileSessionStore
from .tokens import token_expires_at
from .utils import eprint, env_flag
from .validation import is_valid_email, validate_password


def _on_session_expired() -> None:
    eprint("Session expired. Run: sanviplex login")


def _build_client(base_url: str, verbose: bool) -> ApiClient:
    return ApiClient(
        config=ClientConfig(base_url=base_url),
        store=FileSessionStore(),
        on_session_expired=_on_session_expired,
        verbose=verbose,
    )


def _read_password(given: Optional[str], prompt: str = "Password: ") -> str:
    if given:
        return given
    return getpass.getpass(prompt)


def _format_expiry(token: str) -> str:
    exp = token_expires_at(token)
    if exp is None:
        return "unknown"
    expires = datetime.fromtimestamp(exp, timezone.utc).astimezone()
    return f"{expires.strftime('%b %d, %Y %H:%M')} {expires.tzname() or 'local'}"


def cmd_login(client: ApiClient, email: str, password: Optional[str]) -> int:
    if not is_valid_email(email):
        eprint("ERROR: Invalid email format")
        return 1
    outcome = client.login(email, _read_password(password))
    if isinstance(outcome, VerificationRequired):
        eprint("Please verify your email before logging in.")
        if outcome.message:
            eprint(outcome.message)
        eprint(f"Run: sanviplex send-otp --email {outcome.email}")
        return 2
    print(f"Signed in as {outcome.user.full_name or outcome.user.email}")
    return 0


def cmd_signup(client: ApiClient, email: str, first_name: str, last_name: str, password: Optional[str]) -> int:
    if not is_valid_email(email):
        eprint("ERROR: Invalid email format")
        return 1
    pw = _read_password(password)
    check = validate_password(pw)
    if not check.is_valid:
        for message in check.errors:
            eprint(f"ERROR: {message}")
        return 1
    confirm = pw if password else getpass.getpass("Confirm password: ")
    if confirm != pw:
        eprint("ERROR: Passwords do not match")
        return 1
    result = client.signup(email, first_name, last_name, pw, confirm)
    print(result.message or "Account created.")
    print(f"Verify with: sanviplex verify-otp --email {result.email or email} --otp <code>")
    return 0


def cmd_send_otp(client: ApiClient, email: str) -> int:
    if not is_valid_email(email):
        eprint("ERROR: Invalid email format")
        return 1
    result = client.send_otp(email)
    print(result.message or f"Verification code sent to {result.email or email}")
    return 0


def cmd_verify_otp(client: ApiClient, email: str, otp: str) -> int:
    outcome = client.verify_otp(email, otp)
    print(f"Signed in as {outcome.user.full_name or outcome.user.email}")
    return 0


def cmd_info(client: ApiClient, as_json: bool) -> int:
    user = client.get_stored_user()
    tokens = client.get_tokens()
    authenticated = client.is_authenticated()
    if as_json:
        print(
            json.dumps(
                {
                    "authenticated": authenticated,
                    "user": user.to_dict() if user is not None else None,
                    "access_expires_at": token_expires_at(tokens.access) if tokens is not None else None,
                },
                indent=2,
            )
        )
        return 0

    print("👤 Account")
    if tokens is None:
        print("  • Not signed in")
        print("  • Run: sanviplex login --email <email>")
        return 0
    if user is not None:
        print(f"  • Login: {user.email}")
        if user.full_name:
            print(f"  • Name: {user.full_name}")
    print(f"  • Access token expires: {_format_expiry(tokens.access)}")
    if not authenticated:
        print("  • Access token is expiring; it will be refreshed on the next request")
    return 0


def cmd_get(client: ApiClient, path: str) -> int:
    data = client.get(path)
    print(json.dumps(data, indent=2))
    return 0


def cmd_embed(kind: str, tmdb_id: str, provider: str, season: Optional[int], episode: Optional[int]) -> int:
    if kind == "tv":
        if season is None or episode is None:
            eprint("ERROR: --season and --episode are required for tv")
            return 1
        print(tv_embed_url(provider, tmdb_id, season, episode))
    else:
        print(movie_embed_url(provider, tmdb_id))
    return 0


def cmd_serve(host: str, port: int, verbose: bool) -> int:
    app = create_app(verbose=verbose)
    app.run(host=host, debug=False, use_reloader=False, port=port, threaded=True)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sanviplex: storefront account client & stream source API")
    parser.add_argument(
        "--base-url",
        default=API_BASE_URL_DEFAULT,
        help="Storefront API base URL (default from SANVIPLEX_API_BASE_URL)",
    )
    parser.add_argument("--verbose", action="store_true", default=env_flag("SANVIPLEX_VERBOSE"), help="Enable verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_login = sub.add_parser("login", help="Sign in and store the session")
    p_login.add_argument("--email", required=True)
    p_login.add_argument("--password", help="Read from the terminal when omitted")

    p_signup = sub.add_parser("signup", help="Create an account (verification code follows by email)")
    p_signup.add_argument("--email", required=True)
    p_signup.add_argument("--first-name", dest="first_name", required=True)
    p_signup.add_argument("--last-name", dest="last_name", required=True)
    p_signup.add_argument("--password", help="Read from the terminal when omitted")

    p_send = sub.add_parser("send-otp", help="Send a verification code")
    p_send.add_argument("--email", required=True)

    p_verify = sub.add_parser("verify-otp", help="Redeem a verification code and store the session")
    p_verify.add_argument("--email", required=True)
    p_verify.add_argument("--otp", required=True)

    sub.add_parser("logout", help="Remove the stored session")

    p_info = sub.add_parser("info", help="Print the stored account and token state")
    p_info.add_argument("--json", action="store_true", help="Output machine-readable JSON")

    p_get = sub.add_parser("get", help="GET an API path with the stored session")
    p_get.add_argument("path")

    p_embed = sub.add_parser("embed", help="Print a player embed URL")
    p_embed.add_argument("kind", choices=["movie", "tv"])
    p_embed.add_argument("tmdb_id")
    p_embed.add_argument("--provider", choices=sorted(PROVIDERS), default="vidsrc")
    p_embed.add_argument("--season", type=int)
    p_embed.add_argument("--episode", type=int)

    p_serve = sub.add_parser("serve", help="Run the stream source API")
    p_serve.add_argument("--host", default=os.getenv("SANVIPLEX_HOST", "127.0.0.1"))
    p_serve.add_argument("--port", type=int, default=int(os.getenv("SANVIPLEX_PORT", "8000")))
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "embed":
        sys.exit(cmd_embed(args.kind, args.tmdb_id, args.provider, args.season, args.episode))
    if args.command == "serve":
        sys.exit(cmd_serve(host=args.host, port=args.port, verbose=args.verbose))

    client = _build_client(args.base_url, args.verbose)
    try:
        if args.command == "login":
            code = cmd_login(client, args.email, args.password)
        elif args.command == "signup":
            code = cmd_signup(client, args.email, args.first_name, args.last_name, args.password)
        elif args.command == "send-otp":
            code = cmd_send_otp(client, args.email)
        elif args.command == "verify-otp":
            code = cmd_verify_otp(client, args.email, args.otp)
        elif args.command == "logout":
            client.logout()
            print("Signed out.")
            code = 0
        elif args.command == "info":
            code = cmd_info(client, args.json)
        elif args.command == "get":
            code = cmd_get(client, args.path)
        else:
            parser.error("Unknown command")
            return
    except ApiError as exc:
        field = f" ({exc.field})" if exc.field else ""
        eprint(f"ERROR: {exc.message}{field}")
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
