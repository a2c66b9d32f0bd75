import argparse
import logging
import sys
from datetime import date

from dotenv import load_dotenv

from practicum.services.data_access import SqlPracticeStore, get_engine
from practicum.services.practice_service import PracticeWorkflowService
from practicum.workflow.deadlines import DeadlinePolicy
from practicum.workflow.errors import DependencyUnavailableError

load_dotenv()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Classify overdue and expiring practices.")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=date.today(),
        help="Day to evaluate deadlines against (YYYY-MM-DD, default: today)",
    )
    parser.add_argument("--campus", type=int, default=None, help="Only summarise this campus id")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def run(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = SqlPracticeStore(get_engine())
    service = PracticeWorkflowService(store, configuration=store, policy=DeadlinePolicy.from_env())

    try:
        report = service.build_alert_report(args.date)
    except DependencyUnavailableError as e:
        print(f"❌ Alert run failed: {e} ({e.details})", file=sys.stderr)
        return 1

    if args.campus is not None:
        summary = service.summarize(report.overdue, campus_id=args.campus)
        print(summary.model_dump_json(indent=2))
    else:
        print(report.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(run())
