"""CLI commands for NutriMood."""

import argparse
import sys

from sqlalchemy.orm import Session

from nutrimood.database import SessionLocal, init_db
from nutrimood.services.correlation_service import correlation_analyzer
from nutrimood.services.insight_service import insight_composer
from nutrimood.services.log_store import LogStore
from nutrimood.services.statistics_service import statistics_aggregator
from nutrimood.services.trigger_matcher import scan_menu


STATUS_LABELS = {"safe": "SAFE", "caution": "CAUTION", "avoid": "AVOID"}


def show_insights() -> None:
    """Print the ranked insights for the logged data."""
    db: Session = SessionLocal()

    try:
        snapshot = LogStore(db).snapshot()
        insights = insight_composer.compose_insights(
            list(snapshot.meals), list(snapshot.symptoms)
        )

        if not insights:
            print(
                f"Keep logging to unlock insights "
                f"({len(snapshot.meals)}/{insight_composer.MIN_MEAL_LOGS} meals logged)."
            )
            return

        for insight in insights:
            print(f"[{insight.kind}] {insight.title}: {insight.message}")

    finally:
        db.close()


def show_streak() -> None:
    db: Session = SessionLocal()

    try:
        snapshot = LogStore(db).snapshot()
        streak = statistics_aggregator.current_streak(list(snapshot.meals))
        print(f"Current streak: {streak} day{'s' if streak != 1 else ''}")

    finally:
        db.close()


def predict(food_name: str) -> None:
    db: Session = SessionLocal()

    try:
        snapshot = LogStore(db).snapshot()
        prediction = insight_composer.predict_mood(food_name, list(snapshot.meals))
        print(prediction.message)

    finally:
        db.close()


def scan_menu_file(path: str) -> None:
    """Classify each dish in a text file of OCR'd menu text."""
    try:
        with open(path, "r") as f:
            raw_text = f.read()
    except FileNotFoundError:
        print(f"Error: Menu file not found: {path}")
        sys.exit(1)

    db: Session = SessionLocal()

    try:
        snapshot = LogStore(db).snapshot()
        trigger_foods = correlation_analyzer.menu_trigger_foods(
            list(snapshot.symptoms), list(snapshot.meals)
        )
        items = scan_menu(raw_text, trigger_foods)

        if not items:
            print("No menu items found.")
            return

        for item in items:
            line = f"{STATUS_LABELS[item.verdict.status]:<8} {item.name}"
            if item.verdict.reason:
                line += f" ({item.verdict.reason})"
            print(line)

    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="NutriMood CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create the database tables")
    subparsers.add_parser("insights", help="Show ranked insights")
    subparsers.add_parser("streak", help="Show the current logging streak")

    predict_parser = subparsers.add_parser(
        "predict", help="Predict how a food will make you feel"
    )
    predict_parser.add_argument("food", help="Food name to look up")

    scan_parser = subparsers.add_parser(
        "scan-menu", help="Classify dishes in a text file of menu text"
    )
    scan_parser.add_argument("file", help="Path to the menu text")

    args = parser.parse_args()

    if args.command == "init-db":
        init_db()
        print("Database tables created.")
    elif args.command == "insights":
        show_insights()
    elif args.command == "streak":
        show_streak()
    elif args.command == "predict":
        predict(args.food)
    elif args.command == "scan-menu":
        scan_menu_file(args.file)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
