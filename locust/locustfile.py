"""
Locust Load Test Suite

Needs an administrator account (see `eventaro-create-user`), passed through
LOCUST_ADMIN_EMAIL / LOCUST_ADMIN_PASSWORD.

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test overbooking
  locust -f locustfile.py --tags throughput   # Catalogue reads
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import os
import random
import string
from locust import HttpUser, task, between, tag, events
from datetime import datetime, timezone, timedelta

ADMIN_EMAIL = os.getenv("LOCUST_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("LOCUST_ADMIN_PASSWORD", "change-me-please")
CONCURRENCY_PLACES = 10
PASSWORD = "loadtest123"

# Shared state
EVENT_IDS = []
CONCURRENCY_EVENT_ID = None


def random_email():
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return f"load_{suffix}@example.com"


def register(client):
    """Register a throwaway USER and return its auth headers (empty on failure)."""
    resp = client.post("/auth/register", json={
        "fullName": "Load Tester",
        "email": random_email(),
        "password": PASSWORD,
    })
    if resp.status_code == 201:
        return {"Authorization": f"Bearer {resp.json()['accessToken']}"}
    return {}


def admin_login(client):
    resp = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    if resp.status_code == 200:
        return {"Authorization": f"Bearer {resp.json()['accessToken']}"}
    return {}


def create_published_event(client, headers, title, places):
    """Create a draft event and publish it; return its id or None."""
    future = (datetime.now(timezone.utc) + timedelta(days=random.randint(3, 90))).isoformat()
    resp = client.post("/events", json={
        "title": title,
        "description": "Load test event",
        "dateTime": future,
        "location": "Load Venue",
        "maxCapacity": places,
    }, headers=headers)
    if resp.status_code != 201:
        return None
    event_id = resp.json()["id"]
    client.patch(f"/events/{event_id}", json={"status": "PUBLISHED"}, headers=headers,
        name="/events/{id} [publish]")
    return event_id


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: first user creates a {CONCURRENCY_PLACES}-place event as {ADMIN_EMAIL}")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users → 10 places

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM reservations
      WHERE event_id = X AND status IN ('PENDING', 'CONFIRMED');
    Should be ≤ 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = register(self.client)

        if not CONCURRENCY_EVENT_ID:
            admin_headers = admin_login(self.client)
            if admin_headers:
                event_id = create_published_event(
                    self.client, admin_headers, "Concurrency Test Event", CONCURRENCY_PLACES
                )
                if event_id:
                    globals()["CONCURRENCY_EVENT_ID"] = event_id
                    print(f"\n✓ Created event {event_id} with {CONCURRENCY_PLACES} places\n")

    @tag("concurrency")
    @task
    def reserve_limited_places(self):
        """All users fight for the same 10 places."""
        if not CONCURRENCY_EVENT_ID or not self.headers:
            return

        with self.client.post("/reservations",
            json={"eventId": CONCURRENCY_EVENT_ID},
            headers=self.headers,
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 400:
                resp.success()  # Expected: full or already reserved
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - public catalogue

    Run: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s

    Places left are aggregated on every read; watch P95/P99 as the
    reservations table grows.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_published(self):
        resp = self.client.get("/events/published")
        if resp.status_code == 200:
            for event in resp.json():
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        if EVENT_IDS:
            event_id = random.choice(EVENT_IDS)
            self.client.get(f"/events/published/{event_id}", name="/events/published/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register(self.client)

    def _expect(self, resp, *codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def invalid_event_id(self):
        """Reserve a non-existent event."""
        with self.client.post("/reservations", json={"eventId": 999999},
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, 404)

    @tag("edge")
    @task
    def negative_event_id(self):
        with self.client.post("/reservations", json={"eventId": -5},
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, 400)

    @tag("edge")
    @task
    def unknown_field(self):
        """Extra fields are rejected, not ignored."""
        with self.client.post("/reservations", json={"eventId": 1, "status": "CONFIRMED"},
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, 400)

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/reservations", data="not json at all",
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, 400)

    @tag("edge")
    @task
    def user_confirms_own_reservation(self):
        with self.client.patch("/reservations/1/confirm",
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, 403)

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post("/reservations", json={"eventId": 1},
            catch_response=True) as resp:
            self._expect(resp, 401)


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing
      - Some reservations
      - Checking own reservations
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register(self.client)

    @task(50)
    def browse_events(self):
        resp = self.client.get("/events/published")
        if resp.status_code == 200:
            for event in resp.json():
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/events/published/{random.choice(EVENT_IDS)}",
                name="/events/published/{id}")

    @task(10)
    def reserve(self):
        if EVENT_IDS and self.headers:
            with self.client.post("/reservations",
                json={"eventId": random.choice(EVENT_IDS)},
                headers=self.headers, catch_response=True) as resp:
                if resp.status_code in (201, 400):
                    resp.success()

    @task(5)
    def my_reservations(self):
        if self.headers:
            self.client.get("/reservations/my", headers=self.headers)
