# -*- coding: utf-8 -*-
# tools/assistant_cli.py
"""
Command-line front end: renders the SmartAssist pages against a running API.

    python -m tools.assistant_cli stats
    python -m tools.assistant_cli technicians --city "San Francisco" --specialty hvac
    python -m tools.assistant_cli diagnose "Fridge is not cooling" --image ./panel.jpg
"""
import os
import argparse
import mimetypes
from datetime import date
from pathlib import Path

from smartassist.client.api import ApiClient
from smartassist.client.pages import (
    BookingsPage, BookTechnicianPage, DashboardPage, DevicesPage,
    DiagnosePage, LandingPage, TechniciansPage, Toaster,
)
from smartassist.client.query_cache import QueryCache


def _print_toasts(toaster: Toaster, start: int = 0) -> None:
    for t in toaster.toasts[start:]:
        mark = "!" if t.variant == "destructive" else "*"
        print(f"{mark} {t.title}: {t.description}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="SmartAssist command-line client")
    p.add_argument("--base-url", default=os.getenv("APP_API_BASE", "http://127.0.0.1:8000"))
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("home", help="Landing page")
    sub.add_parser("stats", help="Dashboard counters")

    d = sub.add_parser("devices", help="List registered devices")
    d.add_argument("--search", default="")

    a = sub.add_parser("add-device", help="Register a device")
    a.add_argument("--name", required=True)
    a.add_argument("--type", required=True, dest="type_")
    a.add_argument("--brand", default="")
    a.add_argument("--model", default="")
    a.add_argument("--serial-number", default="")
    a.add_argument("--purchase-date", default="", help="YYYY-MM-DD")
    a.add_argument("--warranty-expiry", default="", help="YYYY-MM-DD")
    a.add_argument("--notes", default="")

    t = sub.add_parser("technicians", help="Search technicians")
    t.add_argument("--city", default="all")
    t.add_argument("--specialty", default="all")
    t.add_argument("--search", default="")

    b = sub.add_parser("book", help="Book a technician")
    b.add_argument("technician_id")
    b.add_argument("--date", required=True, help="YYYY-MM-DD")
    b.add_argument("--time", required=True, help='e.g. "2:00 PM"')
    b.add_argument("--service-type", required=True, help="repair, maintenance, installation")
    b.add_argument("--description", required=True)
    b.add_argument("--appliance-id", default="")

    sub.add_parser("bookings", help="List bookings")

    c = sub.add_parser("cancel", help="Cancel a booking")
    c.add_argument("booking_id")

    g = sub.add_parser("diagnose", help="Ask the assistant (interactive when no text is given)")
    g.add_argument("text", nargs="?", default="")
    g.add_argument("--image", help="Path to a photo (image/*, max 5MB)")
    return p


def run_diagnose(page: DiagnosePage, text: str, image_path: str = None) -> int:
    """Returns how many toasts were already printed."""
    image = None
    if image_path:
        path = Path(image_path)
        ctype = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        image = (path.name, path.read_bytes(), ctype)

    if text or image:
        page.send(text, image)
        print(page.render())
        return 0

    # interactive chat; empty line quits
    print(page.render())
    while True:
        try:
            line = input("> ").strip()
        except EOFError:
            break
        if not line:
            break
        before = len(page.toaster.toasts)
        if page.send(line):
            print(f"Assistant: {page.messages[-1]['content']}")
        _print_toasts(page.toaster, before)
    return len(page.toaster.toasts)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    api = ApiClient.connect(args.base_url)
    cache = QueryCache()
    toaster = Toaster()
    shown = 0

    if args.command == "home":
        print(LandingPage(api, cache, toaster).load().render())
    elif args.command == "stats":
        print(DashboardPage(api, cache, toaster).load().render())
    elif args.command == "devices":
        page = DevicesPage(api, cache, toaster)
        page.search_query = args.search
        print(page.load().render())
    elif args.command == "add-device":
        page = DevicesPage(api, cache, toaster)
        page.add_device({
            "name": args.name, "type": args.type_, "brand": args.brand, "model": args.model,
            "serialNumber": args.serial_number, "purchaseDate": args.purchase_date,
            "warrantyExpiry": args.warranty_expiry, "notes": args.notes,
        })
        print(page.render())
    elif args.command == "technicians":
        page = TechniciansPage(api, cache, toaster)
        page.selected_city, page.selected_specialty, page.search_query = args.city, args.specialty, args.search
        print(page.load().render())
    elif args.command == "book":
        page = BookTechnicianPage(api, cache, args.technician_id, toaster).load()
        print(page.render())
        booking = page.submit(date.fromisoformat(args.date), args.time, args.service_type,
                              args.description, appliance_id=args.appliance_id)
        if booking:
            print(f"Booking id={booking['id']} status={booking['status']}")
    elif args.command == "bookings":
        print(BookingsPage(api, cache, toaster).load().render())
    elif args.command == "cancel":
        page = BookingsPage(api, cache, toaster)
        page.cancel(args.booking_id)
        print(page.render())
    elif args.command == "diagnose":
        shown = run_diagnose(DiagnosePage(api, cache, toaster), args.text, args.image)

    _print_toasts(toaster, shown)
    return 1 if any(t.variant == "destructive" for t in toaster.toasts) else 0


if __name__ == "__main__":
    raise SystemExit(main())
