import asyncio
import logging
import shlex
from typing import Dict, List, Optional

from recipe_finder.core.estimator import derive_metrics
from recipe_finder.core.storage import get_storage
from recipe_finder.models.schemas import RecipeRecord
from recipe_finder.services.catalog import CatalogClient
from recipe_finder.services.search import QUICK_SEARCH_TERMS, SearchController
from recipe_finder.services.session import SessionStore
from recipe_finder.settings import Settings

logger = logging.getLogger(__name__)

HELP = """Type ingredients separated by commas to search (e.g. chicken, rice, garlic).
Commands:
  :show N          full recipe for result N
  :fav N           save / unsave result N
  :favs            list saved recipes
  :history         recent searches
  :clear-history   forget recent searches
  :filter k=v ...  time=45 category=seafood difficulty=easy only=on
  :reset           reset all filters
  :clear           clear the current search
  :quick           quick search ideas
  exit             quit"""

FILTER_KEYS = {
    "time": "max_minutes",
    "category": "category",
    "difficulty": "difficulty",
    "only": "ingredients_only",
}


def configure_logging(level: str = "INFO") -> None:
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    )
    root = logging.getLogger("recipe_finder")
    root.setLevel(level)
    root.handlers = [console_handler]
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def format_recipe(index: int, recipe: RecipeRecord, is_favorite: bool = False) -> str:
    metrics = derive_metrics(recipe)
    star = "*" if is_favorite else " "
    tags = " | ".join(
        part
        for part in (
            recipe.category,
            recipe.area,
            f"{metrics.estimated_minutes} min",
            metrics.difficulty.level.value,
        )
        if part
    )
    return f"{star}{index:>3}. {recipe.title or recipe.id}  [{tags}]"


def format_details(recipe: RecipeRecord, is_favorite: bool = False) -> str:
    metrics = derive_metrics(recipe)
    lines = [
        f"{recipe.title}{'  (saved)' if is_favorite else ''}",
        f"{recipe.category or '-'} | {recipe.area or '-'} | "
        f"{metrics.estimated_minutes} min | {metrics.difficulty.level.value}",
        "",
        "Ingredients:",
    ]
    lines += [f"  - {name} {measure}".rstrip() for name, measure in recipe.ingredient_lines()]
    lines += ["", "Instructions:"]
    lines += [f"  {i}. {step}" for i, step in enumerate(recipe.instruction_steps(), start=1)]
    if recipe.video:
        lines += ["", f"Video: {recipe.video}"]
    return "\n".join(lines)


def parse_filter_args(args: List[str]) -> Dict[str, object]:
    changes: Dict[str, object] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep or key not in FILTER_KEYS:
            raise ValueError(f"Unknown filter '{arg}', expected one of: {', '.join(FILTER_KEYS)}")
        field = FILTER_KEYS[key]
        if field == "ingredients_only":
            changes[field] = value.lower() in {"1", "on", "true", "yes"}
        else:
            changes[field] = value
    return changes


def render_results(controller: SearchController) -> str:
    result = controller.result
    if result.error or (result.message and not result.recipes):
        return result.message or ""
    if not result.has_searched:
        return HELP
    if not result.filtered:
        return "No recipes match your filters. Try :reset to see all results."

    count = len(result.filtered)
    lines = [f"Found {count} recipe{'s' if count != 1 else ''}"]
    if result.is_narrowed:
        lines.append(f"(Showing {count} of {len(result.recipes)} recipes after filters)")
    lines += [
        format_recipe(i, recipe, controller.session.is_favorite(recipe.id))
        for i, recipe in enumerate(result.filtered, start=1)
    ]
    return "\n".join(lines)


def _pick(controller: SearchController, arg: str) -> Optional[RecipeRecord]:
    try:
        index = int(arg)
    except ValueError:
        return None
    if 1 <= index <= len(controller.result.filtered):
        return controller.result.filtered[index - 1]
    return None


async def handle_command(controller: SearchController, line: str) -> str:
    """Run one line of user input and return what to print"""
    if not line.startswith(":"):
        await controller.search(line)
        return render_results(controller)

    try:
        command, *args = shlex.split(line)
    except ValueError:
        # unbalanced quotes
        return HELP
    session = controller.session

    if command == ":show":
        recipe = _pick(controller, args[0]) if args else None
        if recipe is None:
            return "Usage: :show N"
        detail = await controller.open_recipe(recipe.id)
        if detail is None:
            return controller.result.message or ""
        return format_details(detail, session.is_favorite(detail.id))

    if command == ":fav":
        recipe = _pick(controller, args[0]) if args else None
        if recipe is None:
            return "Usage: :fav N"
        saved = controller.toggle_favorite(recipe)
        return f"{'Saved' if saved else 'Removed'}: {recipe.title}"

    if command == ":favs":
        if not session.favorites:
            return "No saved recipes yet."
        return "\n".join(
            format_recipe(i, fav, True) for i, fav in enumerate(session.favorites, start=1)
        )

    if command == ":history":
        return "\n".join(session.history) if session.history else "No recent searches."

    if command == ":clear-history":
        session.clear_history()
        return "History cleared."

    if command == ":filter":
        try:
            filters = controller.update_filters(**parse_filter_args(args))
        except ValueError as e:
            return str(e)
        return f"Filters: {filters.model_dump(mode='json')}\n{render_results(controller)}"

    if command == ":reset":
        controller.reset_filters()
        return render_results(controller)

    if command == ":clear":
        controller.clear()
        return "Search cleared."

    if command == ":quick":
        return "Quick ideas: " + ", ".join(QUICK_SEARCH_TERMS)

    return HELP


async def run(settings: Settings) -> None:
    session = SessionStore(get_storage(settings), history_limit=settings.HISTORY_LIMIT)
    session.load()
    logger.info(f"Using {settings.STORAGE_BACKEND} storage, catalog at {settings.CATALOG_BASE_URL}")

    async with CatalogClient(settings) as catalog:
        controller = SearchController(catalog, session)
        print("\nWhat's in your kitchen?")
        print(HELP + "\n")

        while True:
            line = (await asyncio.to_thread(input, "> ")).strip()
            if not line:
                continue
            if line.lower() in {"exit", "quit"}:
                break
            print(await handle_command(controller, line))
            print()


def main() -> None:
    settings = Settings()
    configure_logging(settings.LOG_LEVEL)
    try:
        asyncio.run(run(settings))
    except (KeyboardInterrupt, EOFError):
        pass


if __name__ == "__main__":
    main()
