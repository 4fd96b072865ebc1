# routes.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from controller.submission_controller import submission_router
from util.errors import AppError


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=exc.headers,
    )


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.add_exception_handler(AppError, app_error_handler)
    app.include_router(submission_router)
