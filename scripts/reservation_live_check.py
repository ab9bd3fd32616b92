"""Manual live check against a reservation backend.

Run from the repository root with:
  PYTHONPATH=src CAMP_API_BASE_URL=https://api.example.pl \
  CAMP_ID=1 PROPERTY_ID=1 \
  python scripts/reservation_live_check.py

Sign in and list the account's reservations:
  PYTHONPATH=src CAMP_API_BASE_URL=... LOGIN=... PASSWORD=... \
  python scripts/reservation_live_check.py --my-reservations

Optional environment variables:
  CAMP_API_URI
  CAMP_API_TIMEOUT
  CAMP_API_RETRY_COUNT
  CAMP_ID
  PROPERTY_ID
  LOGIN
  PASSWORD

Validate a stored draft (steps 1-4 under "step1".."step4") for a turnus:
  PYTHONPATH=src CAMP_API_BASE_URL=... CAMP_ID=1 PROPERTY_ID=1 \
  python scripts/reservation_live_check.py --draft-file draft.json

The draft is only submitted when --submit is passed. --print-payload shows
the assembled payload. With --sanitize-output personal data in printed
payloads and reservation listings is masked.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
import traceback

from sanitize import mask_email, sanitize_data
from sanitize import mask_value as _mask_value

from pycampreservation import Client, ClientConfig
from pycampreservation.models import CatalogResult, Reservation
from pycampreservation.steps import step_from_dict
from pycampreservation.wizard import ReservationWizard, SubmissionResult

_LOGGER = logging.getLogger(__name__)


def _require_value(name: str, value: str | None) -> str:
    if not value:
        print(f"Missing required value: {name}", file=sys.stderr)
        raise SystemExit(2)
    return value


def _parse_id(name: str, value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        print(f"{name} must be an integer.", file=sys.stderr)
        raise SystemExit(2) from None


def _format_catalog(result: CatalogResult) -> str:
    if result.error:
        return f"{result.kind}: {result.error}"
    names = ", ".join(f"{entry.id}={entry.name} ({entry.price:.2f})" for entry in result.entries)
    return f"{result.kind} [{result.source}]: {names or '-'}"


def _format_reservation(reservation: Reservation, *, sanitize: bool = False) -> str:
    first_name = reservation.participant_first_name or "-"
    last_name = reservation.participant_last_name or "-"
    if sanitize:
        first_name = _mask_value(first_name)
        last_name = _mask_value(last_name)
    number = reservation.reservation_number or "-"
    return (
        f"{reservation.id} | {number} | {reservation.status or '-'} | "
        f"{first_name} {last_name} | {reservation.total_price:.2f}"
    )


def _load_draft(path: str) -> dict[str, dict]:
    try:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Cannot read draft file: {exc}", file=sys.stderr)
        raise SystemExit(2) from None
    if not isinstance(data, dict):
        print("Draft file must contain a JSON object.", file=sys.stderr)
        raise SystemExit(2)
    return {key: value for key, value in data.items() if isinstance(value, dict)}


def _fill_wizard(wizard: ReservationWizard, draft: dict[str, dict]) -> None:
    for step in (1, 2, 3, 4):
        section = draft.get(f"step{step}")
        if section is not None:
            wizard.form(step).replace(step_from_dict(step, section))


def _format_result(result: SubmissionResult) -> str:
    if result.ok and result.reservation is not None:
        return f"created {result.reservation.reservation_number or result.reservation.id}"
    parts = [result.state.value]
    for step, errors in sorted(result.field_errors.items()):
        parts.extend(f"step{step}.{field}: {message}" for field, message in errors.items())
    parts.extend(result.banner_messages)
    return "; ".join(parts)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Live check for the reservation backend.")
    parser.add_argument("--base-url", dest="base_url", help="Backend base URL.")
    parser.add_argument("--api-uri", dest="api_uri", help="Backend API URI prefix.")
    parser.add_argument("--camp-id", dest="camp_id", help="Camp id for catalog checks.")
    parser.add_argument("--property-id", dest="property_id", help="Turnus (property) id.")
    parser.add_argument("--login", dest="login", help="Account login.")
    parser.add_argument("--password", dest="password", help="Account password.")
    parser.add_argument(
        "--my-reservations",
        dest="my_reservations",
        action="store_true",
        help="List reservations of the signed-in account.",
    )
    parser.add_argument("--draft-file", dest="draft_file", help="JSON file with step1..step4 slices.")
    parser.add_argument(
        "--submit",
        dest="submit",
        action="store_true",
        help="Submit the draft after it validates.",
    )
    parser.add_argument(
        "--print-payload",
        dest="print_payload",
        action="store_true",
        help="Print the assembled reservation payload.",
    )
    parser.add_argument(
        "--sanitize-output",
        dest="sanitize_output",
        action="store_true",
        help="Mask personal data in printed output.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="INFO",
        help="Logging level (default: INFO).",
    )
    parser.add_argument(
        "--traceback",
        dest="traceback",
        action="store_true",
        help="Print full tracebacks on errors.",
    )
    return parser.parse_args()


async def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=args.log_level.upper())
    config = ClientConfig.from_env()
    base_url = _require_value("base_url", args.base_url or config.base_url)
    api_uri = args.api_uri or config.api_uri
    camp_id = _parse_id("camp_id", args.camp_id or os.getenv("CAMP_ID"))
    property_id = _parse_id("property_id", args.property_id or os.getenv("PROPERTY_ID"))
    login = args.login or os.getenv("LOGIN")
    password = args.password or os.getenv("PASSWORD")
    if args.my_reservations and not (login and password):
        print("Missing required value: login/password", file=sys.stderr)
        return 2
    draft = _load_draft(args.draft_file) if args.draft_file else None
    if (draft is not None or args.submit) and not (camp_id and property_id):
        print("Missing required value: camp_id/property_id", file=sys.stderr)
        return 2
    if args.submit and draft is None:
        print("Missing required value: draft_file", file=sys.stderr)
        return 2

    catalogs: list[CatalogResult] = []
    reservations: list[Reservation] = []
    draft_errors: dict[str, str] = {}
    submission: SubmissionResult | None = None
    payload: dict | None = None
    try:
        async with Client(base_url=base_url, api_uri=api_uri, config=config) as client:
            if draft is not None:
                wizard = client.create_wizard(camp_id, property_id)
                _fill_wizard(wizard, draft)
                catalogs.extend((await wizard.load_catalogs(client.catalogs)).values())
                await wizard.load_transport(client.catalogs)
                draft_errors = wizard.go_to(4)
                if args.print_payload:
                    payload = wizard.build_payload()
                if args.submit and not draft_errors:
                    submission = await wizard.submit()
            elif camp_id and property_id:
                for kind in ("protection", "diet", "addon", "promotion"):
                    catalogs.append(await client.catalogs.fetch(kind, camp_id, property_id))
            else:
                _LOGGER.info("CAMP_ID/PROPERTY_ID not set; skipping catalog checks.")
            if login and password:
                user = await client.auth.login(login, password)
                print(f"Signed in as: {mask_email(user.login) if args.sanitize_output else user.login}")
                if args.my_reservations:
                    reservations = await client.reservations.list_mine()
    except Exception as exc:
        print(f"Error: {exc.__class__.__name__}: {exc}", file=sys.stderr)
        if args.traceback:
            traceback.print_exc()
        return 1

    for result in catalogs:
        print(f"Catalog {_format_catalog(result)}")
    if draft is not None:
        if draft_errors:
            print(f"Draft invalid: {len(draft_errors)} errors")
            for field, message in draft_errors.items():
                print(f"- {field}: {message}")
        else:
            print("Draft valid.")
    if payload is not None:
        shown = sanitize_data(payload) if args.sanitize_output else payload
        print(json.dumps(shown, indent=2, ensure_ascii=False))
    if submission is not None:
        print(f"Submission: {_format_result(submission)}")
    if args.my_reservations:
        print(f"Reservations: {len(reservations)}")
        for reservation in reservations:
            print(f"- {_format_reservation(reservation, sanitize=args.sanitize_output)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
