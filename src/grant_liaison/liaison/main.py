"""CLI entrypoint for the liaison engine.

Operates on the JSON state file configured through `.env` / environment.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import BaseModel, ValidationError

from grant_liaison import __version__
from grant_liaison.liaison.config import LiaisonSettings
from grant_liaison.liaison.errors import LiaisonError
from grant_liaison.liaison.logging import configure_logging
from grant_liaison.liaison.models import (
    ApplicationStatus,
    CallStatus,
    CallType,
    FunderType,
    OutcomeStatus,
    Priority,
    Visibility,
)
from grant_liaison.liaison.service import LiaisonService

logger = logging.getLogger(__name__)


def _choices(enum_cls: type) -> list[str]:
    return [m.value for m in enum_cls]


def _print_json(payload: object) -> None:
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    elif isinstance(payload, list):
        payload = [p.model_dump(mode="json") if isinstance(p, BaseModel) else p for p in payload]
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grant-liaison",
        description="Grant application status workflow and follow-up scheduling",
    )
    parser.add_argument("--version", action="version", version=f"grant-liaison {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create-application", help="Record a new grant application")
    create.add_argument("--title", required=True, help="Proposal title")
    create.add_argument("--funder", required=True, help="Funder name")
    create.add_argument(
        "--funder-type", default=FunderType.FEDERAL.value, choices=_choices(FunderType)
    )
    create.add_argument("--contact-person", default="")
    create.add_argument("--contact-email", default="")
    create.add_argument("--contact-phone", default="")
    create.add_argument("--amount", default="0", help="Grant amount, e.g. '450000.00'")
    create.add_argument(
        "--status",
        default=ApplicationStatus.PENDING_SUBMISSION.value,
        choices=_choices(ApplicationStatus),
    )
    create.add_argument("--priority", default=Priority.MEDIUM.value, choices=_choices(Priority))
    create.add_argument("--notes", default="")

    list_apps = subparsers.add_parser("list-applications", help="List applications")
    list_apps.add_argument("--status", default=None, choices=_choices(ApplicationStatus))
    list_apps.add_argument("--priority", default=None, choices=_choices(Priority))
    list_apps.add_argument(
        "--search", default=None, help="Match title, funder or contact (case-insensitive)"
    )

    show = subparsers.add_parser("show-application", help="Show an application and its history")
    show.add_argument("--id", dest="application_id", required=True)

    update = subparsers.add_parser("update-status", help="Move an application to a new status")
    update.add_argument("--id", dest="application_id", required=True)
    update.add_argument("--status", required=True, choices=_choices(ApplicationStatus))
    update.add_argument("--reason", required=True)
    update.add_argument("--milestone", default=None)
    update.add_argument("--expected-date", default=None, help="ISO date, e.g. 2024-12-01")
    update.add_argument("--next-steps", default=None)
    update.add_argument(
        "--follow-up-date",
        default=None,
        help="ISO datetime; schedules a 'Status Update' call when given",
    )
    update.add_argument(
        "--visibility", default=Visibility.INTERNAL.value, choices=_choices(Visibility)
    )
    update.add_argument("--changed-by", default=None)

    schedule = subparsers.add_parser("schedule-call", help="Schedule a call for an application")
    schedule.add_argument("--id", dest="application_id", required=True)
    schedule.add_argument("--title", required=True)
    schedule.add_argument("--date-time", required=True, help="ISO datetime")
    schedule.add_argument("--duration", type=int, default=30, help="Minutes")
    schedule.add_argument("--type", default=CallType.FOLLOW_UP.value, choices=_choices(CallType))
    schedule.add_argument("--priority", default=Priority.MEDIUM.value, choices=_choices(Priority))
    schedule.add_argument("--agenda", default="")
    schedule.add_argument("--participants", default="")
    schedule.add_argument("--location", default="Phone Call")
    schedule.add_argument("--reminder-before", type=int, default=15, help="Minutes")
    schedule.add_argument("--notes", default="")

    outcome = subparsers.add_parser("record-outcome", help="Record the outcome of a call")
    outcome.add_argument("--call-id", required=True)
    outcome.add_argument("--status", required=True, choices=_choices(OutcomeStatus))
    outcome.add_argument("--summary", required=True)
    outcome.add_argument("--next-steps", default=None)
    outcome.add_argument("--follow-up-date", default=None, help="ISO datetime")
    outcome.add_argument("--follow-up-type", default=None, choices=_choices(CallType))
    outcome.add_argument("--rating", type=int, default=5, help="1-5")

    list_calls = subparsers.add_parser("list-calls", help="List scheduled calls")
    list_calls.add_argument("--id", dest="application_id", default=None)
    list_calls.add_argument("--status", default=None, choices=_choices(CallStatus))
    list_calls.add_argument(
        "--due", action="store_true", help="Only scheduled calls whose time has passed"
    )

    subparsers.add_parser("stats", help="Show application and call statistics")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = LiaisonSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    service = LiaisonService.from_settings(settings)

    try:
        if args.command == "create-application":
            record = service.create_application(
                proposal_title=args.title,
                funder_name=args.funder,
                funder_type=args.funder_type,
                contact_person=args.contact_person,
                contact_email=args.contact_email,
                contact_phone=args.contact_phone,
                grant_amount=args.amount,
                status=args.status,
                priority=args.priority,
                notes=args.notes,
            )
            print(f"Created application {record.id}: {record.proposal_title}")
            return 0

        if args.command == "list-applications":
            apps = service.list_applications(
                status=args.status, priority=args.priority, search=args.search
            )
            if not apps:
                print("No applications found")
                return 0
            for app in apps:
                print(
                    f"{app.id}  [{app.status.value}] ({app.priority.value}) "
                    f"{app.proposal_title} - {app.funder_name} - {app.grant_amount}"
                )
            return 0

        if args.command == "show-application":
            _print_json(service.get_application(args.application_id))
            return 0

        if args.command == "update-status":
            result = service.update_status(
                args.application_id,
                new_status=args.status,
                reason=args.reason,
                milestone=args.milestone,
                expected_date=args.expected_date,
                next_steps=args.next_steps,
                follow_up_date=args.follow_up_date,
                visibility=args.visibility,
                changed_by=args.changed_by,
            )
            print(
                f"Application {result.application.id} is now {result.application.status.value} "
                f"(priority {result.application.priority.value})"
            )
            if result.follow_up_call is not None:
                print(
                    f"Scheduled follow-up call {result.follow_up_call.id} "
                    f"at {result.follow_up_call.date_time.isoformat()}"
                )
            return 0

        if args.command == "schedule-call":
            call = service.schedule_call(
                args.application_id,
                title=args.title,
                date_time=args.date_time,
                duration=args.duration,
                type=args.type,
                priority=args.priority,
                agenda=args.agenda,
                participants=args.participants,
                location=args.location,
                reminder_before=args.reminder_before,
                notes=args.notes,
            )
            print(f"Scheduled call {call.id}: {call.title} at {call.date_time.isoformat()}")
            return 0

        if args.command == "record-outcome":
            result = service.record_outcome(
                args.call_id,
                status=args.status,
                summary=args.summary,
                next_steps=args.next_steps,
                follow_up_date=args.follow_up_date,
                follow_up_type=args.follow_up_type,
                rating=args.rating,
            )
            print(f"Call {result.call.id} completed")
            if result.follow_up_call is not None:
                print(
                    f"Scheduled follow-up call {result.follow_up_call.id} "
                    f"({result.follow_up_call.type.value}) "
                    f"at {result.follow_up_call.date_time.isoformat()}"
                )
            return 0

        if args.command == "list-calls":
            if args.due:
                calls = service.due_calls()
            elif args.application_id:
                calls = service.calls_for_application(args.application_id)
            else:
                calls = service.list_calls(status=args.status)
            if args.status and (args.due or args.application_id):
                calls = [c for c in calls if c.status.value == args.status]
            _print_json(calls)
            return 0

        if args.command == "stats":
            _print_json(service.stats())
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except LiaisonError as e:
        logger.warning(e.message, extra={"error": type(e).__name__, "command": args.command})
        print(e.message, file=sys.stderr)
        return 3

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
