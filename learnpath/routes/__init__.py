"""
learnpath/routes/__init__.py
Route registration
"""
from fastapi import APIRouter
from learnpath.routes import auth, categories, paths, nodes, content, questions, progress, users

router = APIRouter()

router.include_router(auth.router)
router.include_router(categories.router)
router.include_router(paths.router)
router.include_router(nodes.router)
router.include_router(content.router)
router.include_router(questions.router)
router.include_router(progress.router)
router.include_router(users.router)
