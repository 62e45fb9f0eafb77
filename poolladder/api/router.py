from fastapi import APIRouter
from poolladder.api.routes import auth, ladder, matches, players, publish

router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(ladder.router, prefix="/ladder", tags=["ladder"])
router.include_router(players.router, prefix="/players", tags=["players"])
router.include_router(matches.router, prefix="/matches", tags=["matches"])
router.include_router(publish.router, prefix="/publish", tags=["publish"])
