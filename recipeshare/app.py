import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import configure_logging, settings
from .engine import InteractionEngine
from .errors import InvalidComment, InvalidRating, NotAuthorized, NotFound
from .filters import FilterMode, find_category
from .recipes import load_categories, load_recipes, seed_store
from .schemas import Category, Comment, CommentIn, RatingIn, Recipe, RecipeDraft, Viewer
from .store import RecipeStore

logger = logging.getLogger(__name__)

store = RecipeStore()
engine = InteractionEngine(store)
categories: List[Category] = []


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Seed the store once at startup
    configure_logging()
    seed_store(store, load_recipes(settings.SEED_RECIPES_FILE))
    categories[:] = load_categories(settings.SEED_CATEGORIES_FILE)
    logger.info(f"Loaded {len(categories)} categories")
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# Allow CORS for API clients (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return _error(404, exc)


@app.exception_handler(InvalidRating)
@app.exception_handler(InvalidComment)
async def invalid_input_handler(request: Request, exc: Exception):
    return _error(422, exc)


@app.exception_handler(NotAuthorized)
async def not_authorized_handler(request: Request, exc: NotAuthorized):
    return _error(403, exc)


def get_engine() -> InteractionEngine:
    return engine


def get_categories() -> List[Category]:
    return categories


def get_viewer(
    x_user_id: Optional[str] = Header(None),
    x_user_name: str = Header(""),
    x_user_avatar: str = Header(""),
) -> Optional[Viewer]:
    if not x_user_id:
        return None
    return Viewer(id=x_user_id, name=x_user_name, avatar=x_user_avatar)


def require_viewer(viewer: Optional[Viewer] = Depends(get_viewer)) -> Viewer:
    if viewer is None:
        raise HTTPException(status_code=401, detail="Sign in required")
    return viewer


def _viewer_id(viewer: Optional[Viewer]) -> Optional[str]:
    return viewer.id if viewer else None


@app.get("/api/categories", response_model=List[Category])
def list_categories(cats: List[Category] = Depends(get_categories)):
    return cats


@app.get("/api/recipes", response_model=List[Recipe])
def list_recipes(
    category: Optional[str] = None,
    by: Optional[FilterMode] = None,
    q: Optional[str] = None,
    viewer: Optional[Viewer] = Depends(get_viewer),
    eng: InteractionEngine = Depends(get_engine),
    cats: List[Category] = Depends(get_categories),
):
    selected = find_category(cats, category) if category else None
    mode = by or FilterMode(settings.DEFAULT_FILTER_MODE)
    return eng.browse(viewer_id=_viewer_id(viewer), category=selected, mode=mode, query=q)


@app.post("/api/recipes", response_model=Recipe, status_code=201)
def publish_recipe(
    draft: RecipeDraft,
    viewer: Viewer = Depends(require_viewer),
    eng: InteractionEngine = Depends(get_engine),
):
    return eng.publish(draft, viewer)


@app.get("/api/recipes/{recipe_id}", response_model=Recipe)
def read_recipe(
    recipe_id: str,
    viewer: Optional[Viewer] = Depends(get_viewer),
    eng: InteractionEngine = Depends(get_engine),
):
    return eng.get(recipe_id, viewer_id=_viewer_id(viewer))


@app.put("/api/recipes/{recipe_id}", response_model=Recipe)
def update_recipe(
    recipe_id: str,
    draft: RecipeDraft,
    viewer: Viewer = Depends(require_viewer),
    eng: InteractionEngine = Depends(get_engine),
):
    return eng.update(recipe_id, draft, viewer.id)


@app.delete("/api/recipes/{recipe_id}")
def delete_recipe(
    recipe_id: str,
    viewer: Viewer = Depends(require_viewer),
    eng: InteractionEngine = Depends(get_engine),
):
    eng.delete(recipe_id, viewer.id)
    return {"deleted": True}


@app.post("/api/recipes/{recipe_id}/like", response_model=Recipe)
def like_recipe(recipe_id: str, viewer: Viewer = Depends(require_viewer), eng: InteractionEngine = Depends(get_engine)):
    return eng.like(recipe_id, viewer.id)


@app.delete("/api/recipes/{recipe_id}/like", response_model=Recipe)
def unlike_recipe(recipe_id: str, viewer: Viewer = Depends(require_viewer), eng: InteractionEngine = Depends(get_engine)):
    return eng.unlike(recipe_id, viewer.id)


@app.post("/api/recipes/{recipe_id}/save", response_model=Recipe)
def save_recipe(recipe_id: str, viewer: Viewer = Depends(require_viewer), eng: InteractionEngine = Depends(get_engine)):
    return eng.save(recipe_id, viewer.id)


@app.delete("/api/recipes/{recipe_id}/save", response_model=Recipe)
def unsave_recipe(recipe_id: str, viewer: Viewer = Depends(require_viewer), eng: InteractionEngine = Depends(get_engine)):
    return eng.unsave(recipe_id, viewer.id)


@app.post("/api/recipes/{recipe_id}/rating", response_model=Recipe)
def rate_recipe(
    recipe_id: str,
    body: RatingIn,
    viewer: Viewer = Depends(require_viewer),
    eng: InteractionEngine = Depends(get_engine),
):
    return eng.rate(recipe_id, viewer.id, body.value)


@app.get("/api/recipes/{recipe_id}/comments", response_model=List[Comment])
def list_comments(recipe_id: str, eng: InteractionEngine = Depends(get_engine)):
    return eng.comments(recipe_id)


@app.post("/api/recipes/{recipe_id}/comments", response_model=Recipe, status_code=201)
def add_comment(
    recipe_id: str,
    body: CommentIn,
    viewer: Viewer = Depends(require_viewer),
    eng: InteractionEngine = Depends(get_engine),
):
    return eng.comment(recipe_id, viewer, body.text, comment_id=body.id)
