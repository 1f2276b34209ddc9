"""Walk a running server through sign-in, tasks, the plan gate and an upgrade.

Needs the API on API_BASE_URL and the same DATABASE_URL as the server
(the Stripe customer id is attached directly in the database).
"""
from __future__ import annotations

import os
import time

import requests
from rich import print
from rich.table import Table
from sqlalchemy import select

from taskdeck.db import SessionLocal
from taskdeck.models.user import User

BASE = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")

class Api:
    def __init__(self, base: str) -> None:
        self.base = base.rstrip("/")
        self.http = requests.Session()

    def sign_in(self, email: str) -> None:
        token = self.call("POST", "/auth/request-link", json={"email": email}).json()["token"]
        access = self.call("POST", "/auth/redeem", json={"token": token}).json()["access_token"]
        self.http.headers["authorization"] = f"bearer {access}"

    def call(self, method: str, path: str, *, check: bool = True, **kwargs) -> requests.Response:
        r = self.http.request(method, f"{self.base}{path}", timeout=10, **kwargs)
        if check:
            r.raise_for_status()
        return r

def wait_ready(api: Api, timeout_s: float = 30.0) -> None:
    deadline = time.monotonic() + timeout_s
    last: str = "no answer"
    while time.monotonic() < deadline:
        try:
            r = api.call("GET", "/ready", check=False)
            if r.status_code == 200:
                return
            last = f"{r.status_code} {r.text}"
        except requests.RequestException as e:
            last = str(e)
        time.sleep(0.5)
    raise RuntimeError(f"api not ready after {timeout_s}s ({last})")

def attach_customer(email: str, customer_id: str) -> None:
    with SessionLocal() as db:
        user = db.scalar(select(User).where(User.email == email))
        if user is None:
            raise RuntimeError(f"no user {email}")
        user.stripe_customer_id = customer_id
        db.commit()

def upgrade_event(customer_id: str, price_id: str = "price_pro_monthly") -> dict:
    now = int(time.time())
    return {
        "id": f"evt_demo_{now}",
        "type": "customer.subscription.updated",
        "data": {
            "object": {
                "id": f"sub_demo_{now}",
                "customer": customer_id,
                "status": "active",
                "current_period_end": now + 30 * 24 * 3600,
                "items": {"data": [{"price": {"id": price_id}}]},
            }
        },
    }

def show_tasks(api: Api) -> None:
    table = Table("title", "status", "priority")
    for t in api.call("GET", "/tasks", params={"sortBy": "title", "sortOrder": "asc"}).json()["tasks"]:
        table.add_row(t["title"], t["status"], t["priority"])
    print(table)

def main() -> None:
    api = Api(BASE)
    wait_ready(api)
    print("[green]ready[/green]")

    email = f"demo+{int(time.time())}@example.com"
    api.sign_in(email)
    print("signed in as", email)

    created = [
        api.call("POST", "/tasks", json={"title": title, "priority": priority}).json()["task"]
        for title, priority in (
            ("Urgent email to client", "urgent"),
            ("Quarterly report", "high"),
            ("Team meeting notes", "low"),
        )
    ]
    api.call("PUT", f"/tasks/{created[0]['id']}", json={"status": "completed"})
    show_tasks(api)

    r = api.call("GET", "/tasks/analytics", check=False)
    print(f"analytics on free plan: [yellow]{r.status_code}[/yellow] {r.json()}")

    customer_id = f"cus_demo_{int(time.time())}"
    attach_customer(email, customer_id)
    api.call("POST", "/webhooks/stripe", json=upgrade_event(customer_id))
    print("subscription:", api.call("GET", "/subscriptions/current").json()["subscription"])

    print("analytics:", api.call("GET", "/tasks/analytics").json())
    suggestions = api.call("POST", "/tasks/ai-suggestions", json={"title": "Prepare project presentation"})
    print("suggestions:", suggestions.json()["suggestions"])
    print("[bold green]done[/bold green]")

if __name__ == "__main__":
    main()
