"""
Quick API smoke run against a locally running gateway.
Tests: register, login, create organization, create event, request
participation, list events.

Start the gateway first:

    python -m eventboard.gateway.server
"""

import os
import uuid

import requests

BASE = os.getenv("SMOKE_BASE_URL", "http://localhost:5050")
suffix = uuid.uuid4().hex[:6]

# 1) Register an organizer and an attendee
for name in ("organizer", "attendee"):
    r = requests.post(f"{BASE}/users/register", json={
        "username": f"{name}_{suffix}",
        "firstName": name.title(),
        "lastName": "Smoke",
        "password": "pass123",
        "repeatPassword": "pass123",
    })
    print("REGISTER:", r.status_code, r.json())

# 2) Login with same credentials
tokens = {}
for name in ("organizer", "attendee"):
    r = requests.post(f"{BASE}/users/login", json={
        "username": f"{name}_{suffix}",
        "password": "pass123",
    })
    print("LOGIN:", r.status_code, r.json())
    tokens[name] = r.json().get("token")

organizer = {"Authorization": f"Bearer {tokens['organizer']}"}
attendee = {"Authorization": f"Bearer {tokens['attendee']}"}

# 3) Create an organization and a private event needing approval
r = requests.post(f"{BASE}/organizations", json={"name": f"Smoke Org {suffix}"}, headers=organizer)
print("CREATE ORGANIZATION:", r.status_code, r.json())

r = requests.post(f"{BASE}/events", json={
    "name": "First Test Event",
    "location": "Room 101",
    "dateAndTime": "2025-10-20T10:00:00Z",
    "isPublic": False,
    "registrationOptions": {"isRegistrationRequired": True, "requiresApproval": True},
}, headers=organizer)
print("CREATE EVENT:", r.status_code, r.json())
event_id = r.json().get("id")

# 4) Ask to join as the attendee
r = requests.post(f"{BASE}/events/{event_id}/request-participation", headers=attendee)
print("REQUEST PARTICIPATION:", r.status_code, r.json())

# 5) List events as anonymous, attendee and organizer
for label, headers in (("ANONYMOUS", {}), ("ATTENDEE", attendee), ("ORGANIZER", organizer)):
    r = requests.get(f"{BASE}/events", headers=headers)
    print(f"LIST EVENTS ({label}):", r.status_code, r.json())
