#!/usr/bin/env python3
"""Interactive terminal client for the Meetcal API.

Usage:
    python cli.py                          # talks to http://localhost:8000
    python cli.py http://host:8000         # talks to another server

Features:
    - Sign up / sign in
    - Month calendar with your status and how many friends are free each day
    - Toggle a day (unspecified -> busy -> available -> unspecified)
    - Meetup suggestions for the coming week
    - Friend list, incoming/outgoing requests, send/accept/reject
"""

import calendar
import sys
from datetime import date

import requests

DEFAULT_SERVER = "http://localhost:8000"

# --- ANSI Colors ---
RESET = "\033[0m"
DIM = "\033[90m"
BOLD = "\033[1m"
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
CYAN = "\033[96m"

DIVIDER = DIM + "─" * 50 + RESET

STATUS_MARKS = {
    "available": f"{GREEN}✓{RESET}",
    "busy": f"{RED}✗{RESET}",
    "unspecified": " ",
}


class ApiError(Exception):
    pass


class MeetcalClient:
    """Thin requests wrapper that keeps the bearer token."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        self.token: str | None = None
        self.session = requests.Session()

    def _request(self, method: str, path: str, **kwargs):
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            resp = self.session.request(
                method, f"{self.base_url}{path}", headers=headers, timeout=10, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise ApiError(f"Server unreachable: {e}") from e
        if resp.status_code >= 400:
            try:
                message = resp.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = resp.text or resp.reason
            raise ApiError(message)
        if resp.status_code == 204:
            return None
        return resp.json()

    def sign_up(self, email: str, password: str, full_name: str) -> dict:
        return self._request(
            "POST", "/api/auth/signup",
            json={"email": email, "password": password, "full_name": full_name},
        )

    def sign_in(self, email: str, password: str) -> dict:
        data = self._request("POST", "/api/auth/signin", json={"email": email, "password": password})
        self.token = data["access_token"]
        return data

    def sign_out(self) -> None:
        self._request("POST", "/api/auth/signout")
        self.token = None

    def month(self, year: int, month: int) -> list[dict]:
        return self._request("GET", "/api/availability/", params={"year": year, "month": month})

    def toggle(self, day: date) -> dict:
        return self._request("POST", f"/api/availability/{day.isoformat()}/toggle")

    def suggestions(self) -> list[dict]:
        return self._request("GET", "/api/suggestions/")

    def friends(self) -> list[dict]:
        return self._request("GET", "/api/friends/")

    def friend_requests(self) -> dict:
        return self._request("GET", "/api/friends/requests")

    def send_request(self, email: str) -> dict:
        return self._request("POST", "/api/friends/requests", json={"email": email})

    def respond(self, request_id: int, accept: bool) -> None:
        action = "accept" if accept else "reject"
        self._request("POST", f"/api/friends/requests/{request_id}/{action}")


# =============================================================
# Rendering
# =============================================================

def render_month(year: int, month: int, day_views: list[dict]) -> list[str]:
    """Calendar grid lines: day number, own status mark, free-friend count."""
    by_day = {date.fromisoformat(v["date"]).day: v for v in day_views}
    lines = [f"{BOLD}{calendar.month_name[month]} {year}{RESET}"]
    lines.append("  ".join(f"{name:>5}" for name in ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")))
    for week in calendar.Calendar().monthdayscalendar(year, month):
        cells = []
        for day in week:
            if day == 0:
                cells.append(" " * 5)
                continue
            view = by_day.get(day)
            mark = STATUS_MARKS[view["own_status"]] if view else " "
            free = len(view["available_friends"]) if view else 0
            count = f"{CYAN}{free}{RESET}" if free else " "
            cells.append(f"{day:>2}{mark}{count} ")
        lines.append("  ".join(cells))
    return lines


def render_suggestions(suggestions: list[dict]) -> list[str]:
    if not suggestions:
        return [
            f"{DIM}No day in the coming week where you and a friend are both free.{RESET}",
            f"{DIM}Mark the days you are available on the calendar!{RESET}",
        ]
    lines = []
    for s in suggestions:
        names = ", ".join(f["full_name"] for f in s["overlapping_friends"])
        lines.append(f"  {BOLD}{s['date']}{RESET}  {YELLOW}[{s['count']}]{RESET}  {names}")
    return lines


# =============================================================
# Interactive loop
# =============================================================

def prompt(text: str) -> str:
    return input(f"  {text}: ").strip()


def authenticate(client: MeetcalClient) -> None:
    while client.token is None:
        choice = prompt("(i)n to sign in, (u)p to sign up").lower()
        try:
            if choice == "u":
                client.sign_up(prompt("Email"), prompt("Password"), prompt("Full name"))
                print(f"  {GREEN}Account created, you can sign in now.{RESET}")
            elif choice == "i":
                client.sign_in(prompt("Email"), prompt("Password"))
                print(f"  {GREEN}Signed in.{RESET}")
        except ApiError as e:
            print(f"  {RED}{e}{RESET}")


def show_friends(client: MeetcalClient) -> None:
    friends = client.friends()
    pending = client.friend_requests()
    print(DIVIDER)
    print(f"{BOLD}Friends{RESET}")
    for f in friends:
        print(f"  {f['full_name']} {DIM}<{f['email']}>{RESET}")
    if not friends:
        print(f"  {DIM}(none yet){RESET}")
    for r in pending["incoming"]:
        print(f"  {YELLOW}#{r['id']} request from {r['counterpart']['full_name']}{RESET}")
    for r in pending["outgoing"]:
        print(f"  {DIM}#{r['id']} waiting for {r['counterpart']['full_name']}{RESET}")


def main():
    client = MeetcalClient(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_SERVER)
    authenticate(client)

    today = date.today()
    year, month = today.year, today.month
    commands = "[c]alendar [t]oggle [n]ext [p]rev [s]uggestions [f]riends [a]dd [r]espond [q]uit"

    while True:
        print(DIVIDER)
        print(f"  {DIM}{commands}{RESET}")
        try:
            cmd = prompt(">").lower()
        except (EOFError, KeyboardInterrupt):
            cmd = "q"

        try:
            if cmd == "q":
                client.sign_out()
                print(f"\n  {DIM}Bye.{RESET}\n")
                break
            elif cmd in ("c", "n", "p"):
                if cmd == "n":
                    year, month = (year + 1, 1) if month == 12 else (year, month + 1)
                elif cmd == "p":
                    year, month = (year - 1, 12) if month == 1 else (year, month - 1)
                for line in render_month(year, month, client.month(year, month)):
                    print(line)
            elif cmd == "t":
                day = date.fromisoformat(prompt("Date (YYYY-MM-DD)"))
                result = client.toggle(day)
                print(f"  {day.isoformat()} is now {BOLD}{result['status']}{RESET}")
            elif cmd == "s":
                for line in render_suggestions(client.suggestions()):
                    print(line)
            elif cmd == "f":
                show_friends(client)
            elif cmd == "a":
                client.send_request(prompt("Friend's email"))
                print(f"  {GREEN}Request sent.{RESET}")
            elif cmd == "r":
                request_id = int(prompt("Request #"))
                accept = prompt("Accept? (y/n)").lower() in ("y", "yes")
                client.respond(request_id, accept)
                print(f"  {GREEN}Done.{RESET}")
        except ApiError as e:
            print(f"  {RED}{e}{RESET}")
        except ValueError as e:
            print(f"  {RED}Invalid input: {e}{RESET}")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n\n{DIM}Exited.{RESET}")
