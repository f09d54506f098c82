"""Router aggregation: every feature router is mounted under ``/api``."""

from fastapi import FastAPI

from . import accounts, assignments, auth, budgets, categories, projections, supercategories, transactions


def register_routers(app: FastAPI) -> None:
    """Attach all API routes to the FastAPI application."""

    for module in (auth, budgets, accounts, supercategories, categories, transactions, projections, assignments):
        app.include_router(module.router, prefix="/api")
