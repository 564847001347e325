"""
Reset scheduler data.

DANGEROUS: This deletes review history!

Without --user the card_state and review_events tables are dropped and
recreated. With --user only that learner's card states and review log are
removed.

Usage:
    python -m scripts.maintenance.reset_learning_db
    python -m scripts.maintenance.reset_learning_db --user anna
    python -m scripts.maintenance.reset_learning_db --database-url sqlite:///learning.db --yes
"""

import argparse

from dotenv import load_dotenv

from srs import fsrs


def describe_target(engine, user_id):
    print(f"Database: {engine.url.render_as_string(hide_password=True)}")
    if user_id:
        repository = fsrs.CardStateRepository(engine, user_id=user_id)
        states = repository.get_all_states()
        print(f"Learner:  {user_id}")
        print(f"  {len(states)} card states, {repository.count_reviews()} review events")
    else:
        print("Learner:  ALL")


def main():
    parser = argparse.ArgumentParser(description="Delete spaced-repetition review data")
    parser.add_argument(
        "--database-url",
        help="Connection string (defaults to DATABASE_URL)"
    )
    parser.add_argument(
        "--user",
        help="Only clear this learner's data instead of dropping the tables"
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the confirmation prompt"
    )
    args = parser.parse_args()

    load_dotenv()
    engine = fsrs.get_engine(args.database_url)
    fsrs.init_db(engine)

    print("=" * 60)
    print("WARNING: Reset scheduler data")
    print("=" * 60)
    describe_target(engine, args.user)
    print()
    print("This will DELETE:")
    print("  - Card states (stability, difficulty, due dates, lapses)")
    print("  - Review events (the full review log)")
    print()

    if not args.yes:
        response = input("Type 'yes' to confirm: ")
        if response.strip().lower() != "yes":
            print("\nCancelled. No changes made.")
            return

    if args.user:
        fsrs.CardStateRepository(engine, user_id=args.user).clear_user_data()
        print(f"\nCleared all review data for {args.user}.")
    else:
        fsrs.reset_db(engine)
        print("\nTables dropped and recreated; the database is empty.")


if __name__ == "__main__":
    main()
