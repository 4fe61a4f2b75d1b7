"""
Seed demo professionals and walk one request through the matching flow.

    python scripts/seed_demo_matching.py [--reset]

Uses the configured database. Emails and LINE pushes are dry runs unless
RESEND_API_KEY / LINE_CHANNEL_ACCESS_TOKEN are set.
"""

import argparse
import os
import sys
from pathlib import Path

import django

BASE_DIR = Path(__file__).resolve().parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "miles_backend.settings")
django.setup()

from professionals.models import Professional  # noqa: E402
from service_requests.models import ServiceRequest  # noqa: E402
from services.matching import advance  # noqa: E402
from services.notifications import build_response_links  # noqa: E402
from services.request_management import respond_to_match  # noqa: E402

DEMO_EMAIL = "demo_client@example.com"

# Shibuya station and three professionals due north (about 2km, 10km, 80km)
ORIGIN = (35.658, 139.7016)
DEMO_PROFESSIONALS = [
    ("demo_near", 35.676, 139.7016, ["real_estate"]),
    ("demo_mid", 35.748, 139.7016, ["real_estate", "drone"]),
    ("demo_far", 36.378, 139.7016, []),
]


def ensure_professional(name: str, lat: float, lng: float, labels) -> Professional:
    professional, _ = Professional.objects.update_or_create(
        email=f"{name}@example.com",
        defaults={
            "name": name,
            "latitude": lat,
            "longitude": lng,
            "labels": labels,
            "is_active": True,
        },
    )
    return professional


def create_demo_request() -> ServiceRequest:
    # Coordinates are set directly so the demo needs no geocoding key
    return ServiceRequest.objects.create(
        client_name="Demo Client",
        client_email=DEMO_EMAIL,
        address="Shibuya, Tokyo",
        latitude=ORIGIN[0],
        longitude=ORIGIN[1],
        note="[サービス] Real estate photos (20 cuts)",
    )


def print_ledger(service_request: ServiceRequest):
    service_request.refresh_from_db()
    print(f"Request {service_request.id} status={service_request.status}")
    for match in service_request.matches.select_related("professional").order_by("created_at"):
        print(
            f"  {match.professional.name:<10} {match.status:<9} "
            f"{match.distance_km or 0:6.2f}km expires={match.expires_at:%H:%M:%S}"
        )


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset", action="store_true", help="Delete earlier demo requests first.")
    args = parser.parse_args()

    if args.reset:
        deleted, _ = ServiceRequest.objects.filter(client_email=DEMO_EMAIL).delete()
        print(f"Deleted {deleted} demo row(s).")

    for name, lat, lng, labels in DEMO_PROFESSIONALS:
        ensure_professional(name, lat, lng, labels)

    service_request = create_demo_request()

    first = advance(service_request.id)
    print(f"First advance: {first.outcome}")
    if not first.match:
        print("No candidate offered. Check professional coordinates.")
        return

    accept_url, reject_url = build_response_links(first.match.id)
    print(f"  accept link: {accept_url}")
    print(f"  reject link: {reject_url}")

    declined = respond_to_match(first.match.id, "reject")
    print(f"First candidate declines: {declined.outcome} (next: {declined.next_outcome})")

    second = service_request.matches.filter(status="waiting").first()
    if second:
        accepted = respond_to_match(second.id, "accept")
        print(f"Second candidate accepts: {accepted.outcome} -> {accepted.message}")

    print_ledger(service_request)


if __name__ == "__main__":
    main()
