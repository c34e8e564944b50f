"""CLI commands for the food analyzer."""

import argparse
import asyncio
import getpass
import logging
import sys
from datetime import date
from typing import Optional

from food_analyzer.config import settings
from food_analyzer.database import SessionLocal, init_db
from food_analyzer.exceptions import FoodAnalyzerError
from food_analyzer.schemas import HealthProfile
from food_analyzer.services.ai_service import ClaudeService
from food_analyzer.services.analysis_formatter import render_sections
from food_analyzer.services.analysis_session import AnalysisSession
from food_analyzer.services.credentials_service import CredentialsService, verify_api_keys
from food_analyzer.services.enrichment_service import EnrichmentService, summarize
from food_analyzer.services.kv_store import SQLKeyValueStore
from food_analyzer.services.page_fetcher import PageFetcher
from food_analyzer.services.profile_repository import ProfileRepository
from food_analyzer.services.profile_service import ProfileService
from food_analyzer.services.search_service import ConditionSearchService, SerpApiClient

logger = logging.getLogger(__name__)


def _store() -> SQLKeyValueStore:
    return SQLKeyValueStore(SessionLocal)


def _profile_service(store: SQLKeyValueStore) -> ProfileService:
    repository = ProfileRepository(store)
    keys = CredentialsService(store).load_api_keys()
    search_service = ConditionSearchService(
        search_client=SerpApiClient(api_key=keys.serpapi),
        page_fetcher=PageFetcher(),
    )
    return ProfileService(repository, EnrichmentService(search_service, repository))


def _fail(message: str) -> None:
    print(f"Error: {message}")
    sys.exit(1)


# =============================================================================
# Setup
# =============================================================================


def initialize() -> None:
    """Clear leftover data on the very first run."""
    if CredentialsService(_store()).initialize_first_run():
        print("Welcome! Local store initialised. Configure your API keys with 'keys set'.")
    else:
        print("Local store already initialised.")


def set_keys(anthropic_key: Optional[str] = None, serpapi_key: Optional[str] = None) -> None:
    if not anthropic_key:
        anthropic_key = getpass.getpass("Anthropic API key: ")
    if not serpapi_key:
        serpapi_key = getpass.getpass("SerpAPI key: ")

    try:
        CredentialsService(_store()).save_api_keys(anthropic_key, serpapi_key)
    except FoodAnalyzerError as e:
        _fail(str(e))

    print("API keys updated successfully!")


def check_keys() -> None:
    keys = CredentialsService(_store()).load_api_keys()
    if not keys.configured:
        _fail("Please configure your API keys first.")

    valid, message = verify_api_keys(keys)
    print(message)
    if not valid:
        sys.exit(1)


# =============================================================================
# Profiles
# =============================================================================


def _draft_from_args(args: argparse.Namespace, base: Optional[HealthProfile] = None) -> HealthProfile:
    """Build a draft profile, falling back to `base` for fields not given."""

    def pick(name: str, base_name: str, default=None):
        value = getattr(args, name, None)
        if value is not None:
            return value
        return getattr(base, base_name) if base is not None else default

    dob = pick("dob", "date_of_birth")
    if isinstance(dob, str):
        dob = date.fromisoformat(dob)
    if dob is None or pick("weight", "weight") is None or pick("height", "height") is None:
        _fail("Date of birth, weight and height are required.")

    return HealthProfile(
        user_id=args.user,
        date_of_birth=dob,
        gender=pick("gender", "gender", "Male"),
        weight=pick("weight", "weight"),
        weight_unit=pick("weight_unit", "weight_unit", "KG"),
        height=pick("height", "height"),
        height_unit=pick("height_unit", "height_unit", "cm"),
        food_allergy=pick("allergy", "food_allergy", ""),
        existing_disease=pick("disease", "existing_disease", ""),
        other_health_condition=pick("condition", "other_health_condition", ""),
    )


def save_profile(args: argparse.Namespace, editing: bool = False) -> None:
    service = _profile_service(_store())

    base = None
    if editing:
        base = service.load_profile(args.user)
        if base is None:
            _fail("Profile not found")

    try:
        draft = _draft_from_args(args, base)
        outcome = service.save_profile(draft, editing=editing)
    except (FoodAnalyzerError, ValueError) as e:
        _fail(str(e))

    if outcome.status == "created":
        print("Health Profile Summary")
        print(outcome.profile.summary())
    else:
        print("Profile updated successfully!")

    if outcome.enriched:
        for line in summarize(outcome.enrichment):
            print(line)


def show_profile(user_id: str) -> None:
    try:
        profile = _profile_service(_store()).load_profile(user_id)
    except FoodAnalyzerError as e:
        _fail(str(e))

    if profile is None:
        _fail("Profile not found")
    print(profile.summary())


def list_profiles() -> None:
    profiles = _profile_service(_store()).list_profiles()
    if not profiles:
        print("No profiles saved yet.")
        return
    for profile in profiles:
        print(f"{profile.user_id}: {profile.age} years, {profile.gender.value}")


def delete_profile(user_id: str, confirmed: bool = False) -> None:
    if not confirmed:
        answer = input(f"Are you sure you want to delete profile {user_id}? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Cancelled.")
            return

    if _profile_service(_store()).delete_profile(user_id):
        print("Profile deleted successfully")
    else:
        _fail("Failed to delete profile")


def show_search_results(user_id: str) -> None:
    record = ProfileRepository(_store()).load_enrichment(user_id)
    for line in summarize(record):
        print(line)


# =============================================================================
# Analysis
# =============================================================================


def analyze(user_id: str, front_image: str, back_image: str) -> None:
    store = _store()
    keys = CredentialsService(store).load_api_keys()
    session = AnalysisSession(
        repository=ProfileRepository(store),
        claude_service=ClaudeService(api_key=keys.anthropic),
        api_keys=keys,
    )

    if session.load_profile(user_id) is None:
        _fail("Profile not found")
    session.set_images(front_image, back_image)

    try:
        asyncio.run(session.run())
    except (FoodAnalyzerError, ValueError) as e:
        _fail(f"Analysis failed: {e}")

    for heading, sections in session.sections().items():
        print(f"=== {heading} ===")
        print(render_sections(sections))
        print()


# =============================================================================
# Entry point
# =============================================================================


def _add_profile_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--user", required=True, help="User ID")
    parser.add_argument("--dob", help="Date of birth (YYYY-MM-DD)")
    parser.add_argument("--gender", choices=["Male", "Female", "Other"])
    parser.add_argument("--weight", type=float)
    parser.add_argument("--weight-unit", choices=["KG", "lbs"])
    parser.add_argument("--height", type=float)
    parser.add_argument("--height-unit", choices=["cm", "inch"])
    parser.add_argument("--allergy", help="Comma-separated food allergies")
    parser.add_argument("--disease", help="Comma-separated existing diseases")
    parser.add_argument("--condition", help="Comma-separated other health conditions")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Food Ingredients Analyzer CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Initialise the local store")

    keys_parser = subparsers.add_parser("keys", help="Manage API keys")
    keys_sub = keys_parser.add_subparsers(dest="action")
    keys_set = keys_sub.add_parser("set", help="Save API keys")
    keys_set.add_argument("--anthropic", help="Anthropic API key (will prompt if not provided)")
    keys_set.add_argument("--serpapi", help="SerpAPI key (will prompt if not provided)")
    keys_sub.add_parser("test", help="Validate the saved API keys")

    profile_parser = subparsers.add_parser("profile", help="Manage health profiles")
    profile_sub = profile_parser.add_subparsers(dest="action")
    _add_profile_arguments(profile_sub.add_parser("create", help="Create a profile"))
    _add_profile_arguments(profile_sub.add_parser("update", help="Edit a profile"))
    show_parser = profile_sub.add_parser("show", help="Show a profile")
    show_parser.add_argument("--user", required=True)
    profile_sub.add_parser("list", help="List all profiles")
    delete_parser = profile_sub.add_parser("delete", help="Delete a profile")
    delete_parser.add_argument("--user", required=True)
    delete_parser.add_argument("--yes", action="store_true", help="Skip confirmation")

    search_parser = subparsers.add_parser("search", help="Inspect cached web data")
    search_sub = search_parser.add_subparsers(dest="action")
    search_show = search_sub.add_parser("show", help="Summarise saved search results")
    search_show.add_argument("--user", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Analyse a food package")
    analyze_parser.add_argument("--user", required=True)
    analyze_parser.add_argument("--front", required=True, help="Front-of-package photo")
    analyze_parser.add_argument("--back", required=True, help="Ingredient list photo")

    return parser


def main(argv: Optional[list[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command:
        init_db()

    action = getattr(args, "action", None)
    if args.command == "init":
        initialize()
    elif args.command == "keys" and action == "set":
        set_keys(args.anthropic, args.serpapi)
    elif args.command == "keys" and action == "test":
        check_keys()
    elif args.command == "profile" and action == "create":
        save_profile(args, editing=False)
    elif args.command == "profile" and action == "update":
        save_profile(args, editing=True)
    elif args.command == "profile" and action == "show":
        show_profile(args.user)
    elif args.command == "profile" and action == "list":
        list_profiles()
    elif args.command == "profile" and action == "delete":
        delete_profile(args.user, confirmed=args.yes)
    elif args.command == "search" and action == "show":
        show_search_results(args.user)
    elif args.command == "analyze":
        analyze(args.user, args.front, args.back)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
