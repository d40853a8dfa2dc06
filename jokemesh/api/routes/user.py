"""User service routes: favorites."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, Field

from jokemesh.core.constants import FAVORITE_PATH, FAVORITES_PATH
from jokemesh.core.logging import get_logger
from jokemesh.services.favorites import Favorite, FavoritesStore


logger = get_logger(__name__)


class FavoriteRequest(BaseModel):
    """Body of POST /api/v1/favorite. Both fields are required and non-empty."""

    joke: str = Field(min_length=1, description="Joke text")
    user_id: str = Field(min_length=1, description="Owner of the favorite")


class FavoriteResponse(BaseModel):
    id: str = Field(description="Creation time, YYYYMMDDHHMMSS", examples=["20240501120000"])
    joke: str
    user_id: str
    created_at: datetime

    @classmethod
    def from_favorite(cls, favorite: Favorite) -> FavoriteResponse:
        return cls(
            id=favorite.id,
            joke=favorite.joke,
            user_id=favorite.user_id,
            created_at=favorite.created_at,
        )


class FavoritesListResponse(BaseModel):
    favorites: list[FavoriteResponse]
    count: int


router = APIRouter(tags=["user"])


def get_store(request: Request) -> FavoritesStore:
    return request.app.state.favorites_store


@router.post(
    FAVORITE_PATH,
    response_model=FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a favorite joke",
    responses={400: {"description": "Missing or empty joke/user_id"}},
)
async def add_favorite(
    body: FavoriteRequest,
    store: FavoritesStore = Depends(get_store),
) -> FavoriteResponse:
    logger.info("Favorite request received", user_id=body.user_id)
    favorite = await store.add(body.joke, body.user_id)
    return FavoriteResponse.from_favorite(favorite)


@router.get(
    FAVORITES_PATH,
    response_model=FavoritesListResponse,
    summary="List favorites, optionally for one user",
)
async def list_favorites(
    user_id: str = Query(default="", description="Only this user's favorites"),
    store: FavoritesStore = Depends(get_store),
) -> FavoritesListResponse:
    logger.info("Favorites list requested", user_id=user_id)
    favorites = await store.get_favorites(user_id)
    return FavoritesListResponse(
        favorites=[FavoriteResponse.from_favorite(f) for f in favorites],
        count=len(favorites),
    )
